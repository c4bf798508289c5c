# Cog that holds the calculator commands
# Every user gets their own session: angle mode, previous answer, and history

from collections import OrderedDict
from discord.ext.commands import Cog, errors, hybrid_command
import discord
import os

from calcly.calculator import format_result, get_angle_mode
from calcly.errors import EvalError
from calcly.functions import CONST, FUNCS
from calcly.global_vars import DEFAULT_ANGLE_MODE, HISTORY_FILENAME, TEMP_DIR
from calcly.session import Session
from calcly.utils import get_flags, make_temp_dir, package_message

# Sessions kept at once; the least recently used one is dropped past this
MAX_SESSIONS = 1000


class Calculator(Cog):

    # attr default_angle_mode - angle mode given to new sessions
    # attr       max_sessions - number of sessions kept before the least recently used is dropped
    # attr           sessions - OrderedDict mapping user ID to that user's Session, most recent last
    def __init__(self, default_angle_mode=DEFAULT_ANGLE_MODE, max_sessions=MAX_SESSIONS):
        self.default_angle_mode = get_angle_mode(default_angle_mode)
        self.max_sessions = max_sessions
        self.sessions = OrderedDict()

    def get_session(self, user):
        if user.id in self.sessions:
            self.sessions.move_to_end(user.id)
        else:
            self.sessions[user.id] = Session(self.default_angle_mode)

            if len(self.sessions) > self.max_sessions:
                self.sessions.popitem(last=False)

        return self.sessions[user.id]

    # $calc command used for calculating the result of mathematical expressions
    # param expression - all user input following the command name
    @hybrid_command(help="Returns the result of a mathematical expression.\n"
                         "Example: `$calc 6 × 7`\n"
                         "This function supports addition `+`, subtraction `-` `−`, multiplication `*` `×`, "
                         "division `/` `÷`, remainder `%`, exponentiation `^`, factorials `!`, percentages `50%`, "
                         "roots `√9`, parenthesis `()`, and implicit multiplication `2(3+4)`.\n"
                         f"Additionally the constants `{'`, `'.join(CONST)}`, `π`, the previous answer `Ans`, "
                         f"and the following functions are supported: `{'`, `'.join(FUNCS)}`\n"
                         "Example: `$calc sin(90) + Ans`\n\n"
                         "**Note**: Trig functions use your current angle mode. Use `$mode` to switch between degrees and radians.",
                    brief="Calculates the result of a mathematical expression")
    async def calc(self, ctx, *, expression: str):
        result = self.get_session(ctx.author).evaluate(expression)
        await ctx.send(result.display)

    @calc.error
    async def calc_error(self, ctx, error):
        # Slash invocations wrap the exception twice
        original = error
        while hasattr(original, "original"):
            original = original.original

        if isinstance(original, EvalError):
            await ctx.send(f"Error: {original}\nPlease use `$help calc` for more information.")
            error.handled = True
        elif isinstance(error, errors.MissingRequiredArgument):
            await ctx.send("You must include a mathematical expression with this command.\n"
                           "Please use `$help calc` for more information.")
            error.handled = True

    # $ans command used to show the result of the last successful calculation
    @hybrid_command(help="Shows the result of your last calculation.\n"
                         "Use `Ans` inside an expression to reuse it: `$calc Ans * 10`",
                    brief="Shows your last answer")
    async def ans(self, ctx):
        if (answer := self.get_session(ctx.author).last_answer) is None:
            return await ctx.send("No previous answer. Use `$calc` to calculate something first.")

        await ctx.send(format_result(answer))

    # $mode command used to switch trig functions between degrees and radians
    # param mode - "deg", "degrees", "rad", or "radians"; shows the current mode when omitted
    @hybrid_command(help="Sets the angle mode used by trig functions.\n"
                         "Example: `$mode rad`\n\n"
                         "Use `deg` or `degrees` for degrees, `rad` or `radians` for radians. "
                         "Without an argument the current mode is shown.",
                    brief="Switch between degrees and radians")
    async def mode(self, ctx, mode: str = None):
        session = self.get_session(ctx.author)

        if mode is None:
            return await ctx.send(f"Angle mode: **{session.angle_mode.value}**")

        try:
            session.set_angle_mode(mode)
        except ValueError:
            return await ctx.send("Bad argument, angle mode must be `deg` or `rad`.\n"
                                  "Please use `$help mode` for more information.")

        await ctx.send(f"Angle mode set to **{session.angle_mode.value}**")

    # $history command used to list, clear, export, and recall past calculations
    # param args - optional flags following the command name
    @hybrid_command(help="Lists your past calculations, newest first.\n\n"
                         "This command has the following flags:\n"
                         "* **-c**: Clears your history\n"
                         "* **-e**: Exports your history as a CSV file\n"
                         "* **-r**: Recalls the expression of a numbered entry\n"
                         "\tExample: `$history -r 2`",
                    brief="Shows your calculation history")
    async def history(self, ctx, *, args: str = None):
        session = self.get_session(ctx.author)
        flags, _ = get_flags(args, make_dic=True, no_args=['c', 'e'])

        if 'c' in flags:
            session.clear_history()
            return await ctx.send("History cleared.")

        if 'e' in flags:
            return await self.send_history_csv(ctx, session)

        if 'r' in flags:
            return await self.send_recalled(ctx, session, flags['r'])

        if not len(session.history):
            return await ctx.send("No history yet. Use `$calc` to calculate something.")

        lines = [f"{i}. `{entry.expression}` = **{entry.result}** *({entry.timestamp})*"
                 for i, entry in enumerate(session.history, start=1)]
        await package_message(lines, ctx, multi_send=True)

    async def send_history_csv(self, ctx, session):
        if not len(session.history):
            return await ctx.send("No history to download.")

        make_temp_dir()
        filepath = f"{TEMP_DIR}/{ctx.author.id}_{HISTORY_FILENAME}"

        with open(filepath, 'w', encoding='utf8', newline='') as csv_file:
            csv_file.write(session.export_history_csv())

        if os.path.exists(filepath):
            await ctx.send(file=discord.File(filepath, filename=HISTORY_FILENAME))
            os.remove(filepath)
        else:
            print("Error occurred while exporting history. Temp file not created/deleted.")

    async def send_recalled(self, ctx, session, number):
        if not (number or '').isdigit() or not 0 < int(number) <= len(session.history):
            return await ctx.send(f"Bad argument, give a number from 1 to {len(session.history)}.\n"
                                  "Please use `$help history` for more information.")

        await ctx.send(session.history.select(int(number) - 1))
