"""
공용 pytest 픽스처
"""

import pytest

from litps import ConversionOptions, ErrorSink


SAMPLE_PS = """%!PS-Adobe-3.0
%%Title: Sample Drawing
%%Creator: hand written
%%BoundingBox: 0 0 200 200
%%EndComments
1 0 0 setrgbcolor
10 10 moveto
190 190 lineto
stroke
/Helvetica findfont 14 scalefont setfont
20 100 moveto
(Hello (PDF) World) show
showpage
"""


@pytest.fixture
def sink():
    return ErrorSink()


@pytest.fixture
def options():
    return ConversionOptions()


@pytest.fixture
def sample_ps():
    return SAMPLE_PS


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "sample.ps"
    path.write_text(SAMPLE_PS, encoding='utf-8')
    return path
