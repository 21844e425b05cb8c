"""
Page Model Output Formatter

파싱 결과(PageModel)를 사람이/프로그램이 읽는 형태로 변환:
- summary: 문서 정보 텍스트 (CLI --info)
- JSON: 페이지별 경로/텍스트 구조 (CLI --json)
"""

import json
from typing import Any, Dict, List

from .core.model import PageModel, Page


def page_to_dict(page: Page, index: int) -> Dict[str, Any]:
    return {
        'page': index + 1,
        'width': page.width,
        'height': page.height,
        'paths': [
            {'op': element.op.name.lower(), 'points': [round(v, 3) for v in element.points]}
            for element in page.paths
        ],
        'texts': [
            {
                'text': item.text,
                'x': round(item.x, 3),
                'y': round(item.y, 3),
                'font': item.font_name,
                'size': item.font_size,
                'color': list(item.color),
            }
            for item in page.texts
        ],
    }


def to_dict(model: PageModel) -> Dict[str, Any]:
    """PageModel -> dict"""
    return {
        'title': model.title,
        'creator': model.creator,
        'dsc_compliant': model.dsc_compliant,
        'bounding_box': list(model.bbox.as_tuple()),
        'page_count': model.page_count,
        'pages': [page_to_dict(page, i) for i, page in enumerate(model.pages)],
        'warnings': list(model.warnings),
    }


def to_json(model: PageModel, indent: int = 2) -> str:
    """PageModel -> JSON 문자열"""
    return json.dumps(to_dict(model), ensure_ascii=False, indent=indent)


def to_summary(model: PageModel, filename: str = "") -> str:
    """
    문서 정보 요약

    Returns:
        str: 여러 줄 텍스트
    """
    lines: List[str] = []

    if filename:
        lines.append(f"파일: {filename}")
    if model.title:
        lines.append(f"제목: {model.title}")
    if model.creator:
        lines.append(f"작성 프로그램: {model.creator}")

    x1, y1, x2, y2 = model.bbox.as_tuple()
    source = "헤더" if model.bbox.valid else "기본값"
    lines.append(f"BoundingBox: {x1:g} {y1:g} {x2:g} {y2:g} ({source})")
    lines.append(f"DSC: {'예' if model.dsc_compliant else '아니오'}")
    lines.append(f"페이지: {model.page_count}")

    for i, page in enumerate(model.pages, 1):
        lines.append(f"  페이지 {i}: 경로 요소 {len(page.paths)}개, 텍스트 {len(page.texts)}개")

    if model.warnings:
        lines.append(f"경고: {len(model.warnings)}개")
        for warning in model.warnings:
            lines.append(f"  - {warning}")

    return '\n'.join(lines)
