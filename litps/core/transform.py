"""
좌표 변환

PostScript 사용자 공간(좌하단 원점, BoundingBox 크기)을
PDF 페이지 공간(대상 용지 크기, 상단 기준 y)으로 매핑한다.

    scale  = min(tw / psW, th / psH)       # 종횡비 유지
    offset = ((tw - psW*scale)/2, (th - psH*scale)/2)   # 가운데 정렬
    (x, y) -> (x*scale + ox, th - (y*scale + oy))
"""

import math
from dataclasses import dataclass
from typing import Tuple

from .model import BoundingBox, A4_WIDTH, A4_HEIGHT


@dataclass
class CoordinateTransform:
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0
    page_width: float = A4_WIDTH
    page_height: float = A4_HEIGHT

    @classmethod
    def from_bbox(cls, bbox: BoundingBox, page_width: float = A4_WIDTH,
                  page_height: float = A4_HEIGHT) -> 'CoordinateTransform':
        """BoundingBox와 대상 페이지 크기로 변환 계산"""
        ps_width = bbox.width
        ps_height = bbox.height
        if not (0 < ps_width < math.inf and 0 < ps_height < math.inf):
            raise ValueError(f"Degenerate bounding box: {bbox.as_tuple()}")

        scale = min(page_width / ps_width, page_height / ps_height)
        if not (0 < scale < math.inf):
            raise ValueError(f"Degenerate bounding box: {bbox.as_tuple()} (scale {scale})")
        offset_x = (page_width - ps_width * scale) / 2.0
        offset_y = (page_height - ps_height * scale) / 2.0

        return cls(scale, offset_x, offset_y, page_width, page_height)

    def apply(self, x: float, y: float) -> Tuple[float, float]:
        return (
            x * self.scale + self.offset_x,
            self.page_height - (y * self.scale + self.offset_y),
        )

    def apply_delta(self, dx: float, dy: float) -> Tuple[float, float]:
        """상대 이동량 변환 (rmoveto, rlineto) - y축 뒤집힘"""
        return (dx * self.scale, -dy * self.scale)
