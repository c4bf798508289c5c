from collections import deque
from csv import QUOTE_ALL, writer
from dataclasses import dataclass
from datetime import datetime
from io import StringIO


HISTORY_LIMIT = 200
CSV_HEADER = "Expression,Result,Time"


@dataclass(frozen=True)
class HistoryEntry:
    expression: str
    result: str
    timestamp: str


# Local date and time as a browser would show it: 10/19/2026, 5:03:09 PM
def get_timestamp(now=None):
    now = datetime.now() if now is None else now

    return f"{now.month}/{now.day}/{now.year}, {now.strftime('%I:%M:%S %p').lstrip('0')}"


# Past computations, newest first
# Holds at most HISTORY_LIMIT entries; recording past the limit drops the oldest
class HistoryLog:
    def __init__(self, limit=HISTORY_LIMIT):
        self.entries = deque(maxlen=limit)

    def __len__(self):
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def __getitem__(self, index):
        return self.entries[index]

    # param expression - text exactly as the user typed it
    # param     result - formatted result string
    def record(self, expression, result, timestamp=None):
        entry = HistoryEntry(expression, result, get_timestamp() if timestamp is None else timestamp)
        self.entries.appendleft(entry)

        return entry

    def clear(self):
        self.entries.clear()

    # Returns the expression of the entry at index (0 is the newest) for reuse as input
    def select(self, index):
        return self.entries[index].expression

    def export_csv(self):
        buffer = StringIO()
        buffer.write(f"{CSV_HEADER}\n")

        csv_writer = writer(buffer, quoting=QUOTE_ALL, lineterminator='\n')
        csv_writer.writerows((i.expression, i.result, i.timestamp) for i in self.entries)

        return buffer.getvalue()
