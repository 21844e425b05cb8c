"""
페이지 모델

파서 결과: 페이지별 경로/텍스트 요소 + 문서 메타데이터.
좌표는 모두 변환 후(PDF 페이지 공간) 값이다.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

A4_WIDTH = 595.276
A4_HEIGHT = 841.890


class PathOp(Enum):
    """경로 요소 종류"""
    MOVE_TO = "m"
    LINE_TO = "l"
    CURVE_TO = "c"
    CLOSE_PATH = "h"


@dataclass
class PathElement:
    """경로 요소 (m, l, c, h)"""
    op: PathOp
    points: Tuple[float, ...] = ()

    @classmethod
    def move_to(cls, x: float, y: float) -> 'PathElement':
        return cls(PathOp.MOVE_TO, (x, y))

    @classmethod
    def line_to(cls, x: float, y: float) -> 'PathElement':
        return cls(PathOp.LINE_TO, (x, y))

    @classmethod
    def curve_to(cls, x1: float, y1: float, x2: float, y2: float,
                 x3: float, y3: float) -> 'PathElement':
        return cls(PathOp.CURVE_TO, (x1, y1, x2, y2, x3, y3))

    @classmethod
    def close_path(cls) -> 'PathElement':
        return cls(PathOp.CLOSE_PATH)


@dataclass
class TextElement:
    """텍스트 요소"""
    text: str
    x: float
    y: float
    font_name: str = "Helvetica"
    font_size: float = 12.0
    color: Tuple[float, float, float] = (0.0, 0.0, 0.0)


@dataclass
class BoundingBox:
    """%%BoundingBox: llx lly urx ury"""
    x1: float = 0.0
    y1: float = 0.0
    x2: float = A4_WIDTH
    y2: float = A4_HEIGHT
    valid: bool = False  # 헤더에서 읽었는지 여부

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x1, self.y1, self.x2, self.y2)


@dataclass
class Page:
    width: float = A4_WIDTH
    height: float = A4_HEIGHT
    paths: List[PathElement] = field(default_factory=list)
    texts: List[TextElement] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.paths and not self.texts


@dataclass
class PageModel:
    """파싱된 PostScript 문서"""
    pages: List[Page] = field(default_factory=list)
    bbox: BoundingBox = field(default_factory=BoundingBox)
    title: str = ""
    creator: str = ""
    dsc_compliant: bool = False
    warnings: List[str] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def add_page(self, page: Page) -> Page:
        self.pages.append(page)
        return page
