"""
변환 옵션

CLI나 API 호출자가 채워서 파서/생성기에 넘기는 설정 값
- PDF 호환성 레벨 (헤더 %PDF-x.y)
- 대상 페이지 크기 (포인트 단위)
- 문서 메타데이터 덮어쓰기
"""

from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

VERSION = '0.3.0'
PRODUCER = f'LitPS {VERSION}'

# --------------------------------------------------------------------------- #
# 용지 크기 (포인트, 1pt = 1/72 inch)
# --------------------------------------------------------------------------- #
PAPER_SIZES: Dict[str, Tuple[float, float]] = {
    'a3': (841.890, 1190.551),
    'a4': (595.276, 841.890),
    'a5': (419.528, 595.276),
    'letter': (612.0, 792.0),
    'legal': (612.0, 1008.0),
    'executive': (522.0, 756.0),
}

DEFAULT_COMPATIBILITY_LEVEL = 1.7
MIN_COMPATIBILITY_LEVEL = 1.0
MAX_COMPATIBILITY_LEVEL = 2.0


@dataclass
class ConversionOptions:
    """변환 옵션"""
    compatibility_level: float = DEFAULT_COMPATIBILITY_LEVEL
    page_width: float = PAPER_SIZES['a4'][0]
    page_height: float = PAPER_SIZES['a4'][1]
    paper_size: str = 'a4'

    # 메타데이터 (비어 있으면 DSC 헤더 값 사용)
    title: Optional[str] = None
    creator: Optional[str] = None

    def __post_init__(self):
        if not (MIN_COMPATIBILITY_LEVEL <= self.compatibility_level <= MAX_COMPATIBILITY_LEVEL):
            raise ValueError(
                f"Unsupported compatibility level: {self.compatibility_level} "
                f"(expected {MIN_COMPATIBILITY_LEVEL}-{MAX_COMPATIBILITY_LEVEL})"
            )
        if self.page_width <= 0 or self.page_height <= 0:
            raise ValueError(f"Invalid page size: {self.page_width}x{self.page_height}")

    @classmethod
    def for_paper(cls, name: str, **kwargs) -> 'ConversionOptions':
        """용지 이름으로 옵션 생성 (a4, letter, ...)"""
        key = name.strip().lower()
        if key not in PAPER_SIZES:
            raise ValueError(f"Unknown paper size: {name}")
        width, height = PAPER_SIZES[key]
        return cls(page_width=width, page_height=height, paper_size=key, **kwargs)

    def with_changes(self, **kwargs) -> 'ConversionOptions':
        return replace(self, **kwargs)

    @property
    def page_size(self) -> Tuple[float, float]:
        return (self.page_width, self.page_height)
