# Main starting file for Calcly
# This file creates the Bot object, loads the cogs, and starts the event loop

import discord
from discord.ext import commands
from dotenv import load_dotenv
from os import getenv

# env must be loaded before importing the calcly modules
load_dotenv()
TOKEN = getenv("DISCORD_TOKEN")  # API token for the bot
if TOKEN is None:
    exit("Environment file missing/corrupted. Halting now!")

# Local dependencies
from calcly.cogs import add_cogs
from calcly.global_vars import COMMAND_PREFIX
from calcly.utils import make_temp_dir

activity = discord.Activity(type=discord.ActivityType.listening,
                            name=f"{COMMAND_PREFIX}calc",
                            state=f"Listening for {COMMAND_PREFIX}help")

bot = commands.Bot(command_prefix=COMMAND_PREFIX,
                   case_insensitive=True,
                   intents=discord.Intents.all(),
                   activity=activity)

# Add brief help text for the help command
next(filter(lambda x: x.name == "help", bot.commands)).brief = "Shows this message"


# Runs when bot has successfully logged in
# Note: This can and will be called multiple times during the bot's up-times
@bot.event
async def on_ready():
    # Only add cogs if no cogs are currently present on the bot
    # This prevents the recurring CommandRegistrationError exception
    if not bot.cogs:
        make_temp_dir()
        await add_cogs(bot)

    print(f"\n{bot.user} is connected to the following guild(s):\n")
    for guild in bot.guilds:
        print(f"{guild.name} (ID: {guild.id})\nGuild Members: {len(guild.members)}\n")

    await bot.tree.sync()

@bot.event
async def on_command_error(ctx, error):
    if hasattr(error, "handled") and error.handled:
        return

    try:
        author = f"{ctx.author} (a.k.a. {ctx.author.nick})"
    except AttributeError:
        author = f"{ctx.author}"

    print(f"\nCommand error triggered\n"
          f"\t Author: {author}\n"
          f"\t  Guild: {ctx.guild}\n"
          f"\tChannel: {ctx.message.channel}\n"
          f"\tMessage: {ctx.message.content}\n"
          f"Error:\n{error}")


# Begin the bot's event loop
bot.run(TOKEN)
