"""Line layout of the two text blocks printed on the stamp.

Coordinates are relative to the block's own transparent layer and give the
baseline of each line.
"""

import math
from datetime import datetime

from fieldreport.imaging.models import TextLine

# Lines are counted per 20 characters but sliced 24 at a time, so long
# descriptions end with empty slices. Kept as-is for output compatibility.
DESCRIPTION_WRAP_STEP = 20
DESCRIPTION_WRAP_WIDTH = 24

LINE_X = 10
FIRST_LINE_Y = 30
SECOND_LINE_Y = 55
DESCRIPTION_FIRST_Y = 80
LINE_HEIGHT = 25


def wrap_description(
    description: str,
    step: int = DESCRIPTION_WRAP_STEP,
    width: int = DESCRIPTION_WRAP_WIDTH,
) -> list[str]:
    """Slice the description into ceil(len / step) chunks of up to ``width`` chars."""
    count = math.ceil(len(description) / step)
    return [description[i * width : (i + 1) * width] for i in range(count)]


def format_stamp_date(moment: datetime) -> str:
    return f"{moment.month}/{moment.day}/{moment.year}"


def format_stamp_time(moment: datetime) -> str:
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d}:{moment.second:02d} {suffix}"


def identity_lines(report_id: int | str, domain: str) -> list[TextLine]:
    return [
        TextLine(text=f"report id : {report_id}", x=LINE_X, y=FIRST_LINE_Y),
        TextLine(text=domain, x=LINE_X, y=SECOND_LINE_Y),
    ]


def detail_lines(
    submitted_at: datetime,
    description: str,
    step: int = DESCRIPTION_WRAP_STEP,
    width: int = DESCRIPTION_WRAP_WIDTH,
) -> list[TextLine]:
    lines = [
        TextLine(text=format_stamp_date(submitted_at), x=LINE_X, y=FIRST_LINE_Y),
        TextLine(text=format_stamp_time(submitted_at), x=LINE_X, y=SECOND_LINE_Y),
    ]
    for i, chunk in enumerate(wrap_description(description, step, width)):
        lines.append(TextLine(text=chunk, x=LINE_X, y=DESCRIPTION_FIRST_Y + i * LINE_HEIGHT))
    return lines
