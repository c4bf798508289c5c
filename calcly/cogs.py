# Common collection space for all of the bots cogs
# This file imports the cogs from each file and adds them to the bot

# Local dependencies
from calcly.Cogs.Calculator import Calculator
from calcly.global_vars import DEFAULT_ANGLE_MODE

# Adds each cog to the bot, this is called once the bot is ready for the first time
# param bot - commands.Bot object containing our client
async def add_cogs(bot):
    await bot.add_cog(Calculator(DEFAULT_ANGLE_MODE))
