# Settings read from the environment (.env is loaded by bot.py before this is imported)

from os import getenv


COMMAND_PREFIX = getenv("CALC_COMMAND_PREFIX", '$')
TEMP_DIR = getenv("CALC_TEMP_DIR", "./tmp")
DEFAULT_ANGLE_MODE = getenv("CALC_ANGLE_MODE", "deg")

HISTORY_FILENAME = "calc_history.csv"
