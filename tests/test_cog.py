from asyncio import run
import os
from types import SimpleNamespace

from discord.ext.commands import errors

from calcly.calculator import AngleMode
from calcly.Cogs import Calculator as calculator_cog
from calcly.Cogs.Calculator import Calculator
from calcly import utils
from calcly.errors import InvalidCharacter


class FakeCtx:
    def __init__(self, user_id=1):
        self.author = SimpleNamespace(id=user_id)
        self.sent = []
        self.files = []

    async def send(self, content=None, file=None, **kwargs):
        self.sent.append(content)

        if file is not None:
            self.files.append((file.filename, file.fp.read().decode("utf8")))
            file.close()


def invoke(command, cog, ctx, *args, **kwargs):
    run(command.callback(cog, ctx, *args, **kwargs))
    return ctx.sent[-1]

def test_calc_replies_with_display():
    cog, ctx = Calculator(), FakeCtx()

    assert invoke(Calculator.calc, cog, ctx, expression="2(3+4)") == "14"
    assert invoke(Calculator.calc, cog, ctx, expression="Ans*10") == "140"

def test_calc_error_handler_marks_handled():
    cog, ctx = Calculator(), FakeCtx()
    error = errors.CommandInvokeError(InvalidCharacter('#', 1))

    run(cog.calc_error(ctx, error))

    assert ctx.sent[0].startswith("Error: Invalid character '#'")
    assert error.handled

def test_ans():
    cog, ctx = Calculator(), FakeCtx()

    assert invoke(Calculator.ans, cog, ctx).startswith("No previous answer")

    invoke(Calculator.calc, cog, ctx, expression="1/4")
    assert invoke(Calculator.ans, cog, ctx) == "0.25"

def test_mode():
    cog, ctx = Calculator(), FakeCtx()

    assert invoke(Calculator.mode, cog, ctx) == "Angle mode: **deg**"
    assert invoke(Calculator.mode, cog, ctx, "RADIANS") == "Angle mode set to **rad**"
    assert cog.get_session(ctx.author).angle_mode is AngleMode.RADIANS
    assert invoke(Calculator.mode, cog, ctx, "grad").startswith("Bad argument")

def test_sessions_are_per_user():
    cog = Calculator(default_angle_mode="rad")
    first, second = FakeCtx(1), FakeCtx(2)

    invoke(Calculator.calc, cog, first, expression="6*7")

    assert invoke(Calculator.ans, cog, second).startswith("No previous answer")
    assert cog.get_session(second.author).angle_mode is AngleMode.RADIANS

def test_history_listing_recall_and_clear():
    cog, ctx = Calculator(), FakeCtx()

    assert invoke(Calculator.history, cog, ctx).startswith("No history yet")

    invoke(Calculator.calc, cog, ctx, expression="2+2")
    invoke(Calculator.calc, cog, ctx, expression="Ans*10")

    listing = invoke(Calculator.history, cog, ctx)
    assert listing.startswith("1. `Ans*10` = **40**")
    assert "\n2. `2+2` = **4**" in listing

    assert invoke(Calculator.history, cog, ctx, args="-r 2") == "2+2"
    assert invoke(Calculator.history, cog, ctx, args="-r 3").startswith("Bad argument")
    assert invoke(Calculator.history, cog, ctx, args="-r 0").startswith("Bad argument")

    assert invoke(Calculator.history, cog, ctx, args="-c") == "History cleared."
    assert len(cog.get_session(ctx.author).history) == 0

def test_export_with_empty_history():
    cog, ctx = Calculator(), FakeCtx()

    assert invoke(Calculator.history, cog, ctx, args="-e") == "No history to download."

def test_export_attaches_csv_and_removes_temp_file(tmp_path, monkeypatch):
    monkeypatch.setattr(calculator_cog, "TEMP_DIR", str(tmp_path))
    monkeypatch.setattr(utils, "TEMP_DIR", str(tmp_path))
    cog, ctx = Calculator(), FakeCtx(7)

    invoke(Calculator.calc, cog, ctx, expression='2(3+4)')
    invoke(Calculator.calc, cog, ctx, expression="1/0")
    run(Calculator.history.callback(cog, ctx, args="-e"))

    filename, content = ctx.files[0]
    lines = content.split('\n')

    assert filename == "calc_history.csv"
    assert lines[0] == "Expression,Result,Time"
    assert lines[1].startswith('"1/0","inf","')
    assert lines[2].startswith('"2(3+4)","14","')
    assert lines[3] == ""
    assert not os.path.exists(tmp_path / "7_calc_history.csv")
    assert os.listdir(tmp_path) == []

def test_full_history_listing_is_split_without_losing_lines():
    cog, ctx = Calculator(), FakeCtx()
    session = cog.get_session(ctx.author)

    for i in range(200):
        session.record_history(f"{i}*123456789+987654321", str(i))

    run(Calculator.history.callback(cog, ctx))

    assert len(ctx.sent) > 1
    assert all(0 < len(i) <= utils.MAX_MSG_LEN for i in ctx.sent)

    lines = '\n'.join(ctx.sent).split('\n')

    assert len(lines) == 200
    assert lines[0].startswith("1. `199*123456789+987654321` = **199**")
    assert lines[-1].startswith("200. `0*123456789+987654321` = **0**")

def test_mode_accepts_whole_words_only():
    cog, ctx = Calculator(), FakeCtx()

    assert invoke(Calculator.mode, cog, ctx, "radish").startswith("Bad argument")
    assert invoke(Calculator.mode, cog, ctx, "degenerate").startswith("Bad argument")
    assert cog.get_session(ctx.author).angle_mode is AngleMode.DEGREES
    assert invoke(Calculator.mode, cog, ctx, "Radians") == "Angle mode set to **rad**"
    assert invoke(Calculator.mode, cog, ctx, "degrees") == "Angle mode set to **deg**"

def test_sessions_drop_least_recently_used():
    cog = Calculator(max_sessions=2)
    first, second, third = FakeCtx(1), FakeCtx(2), FakeCtx(3)

    invoke(Calculator.calc, cog, first, expression="1")
    invoke(Calculator.calc, cog, second, expression="2")
    invoke(Calculator.ans, cog, first)
    invoke(Calculator.calc, cog, third, expression="3")

    assert list(cog.sessions) == [1, 3]
    assert invoke(Calculator.ans, cog, first) == "1"
    assert invoke(Calculator.ans, cog, second).startswith("No previous answer")
