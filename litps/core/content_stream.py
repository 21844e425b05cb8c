"""
PDF Content Stream Renderer

페이지 모델의 경로/텍스트 요소를 Content Stream 연산자로 변환

출력 순서:
- q, cm, RG/rg, w, J, j: 초기 그래픽 상태
- m, l, c, h, S: 경로 (열린 경로는 다음 m 앞과 마지막에 S)
- BT/ET, Tf, rg, Tm, Tj: 텍스트
- Q
"""

from typing import List

from .model import Page, PathElement, PathOp, TextElement


def format_number(value: float, precision: int = 2) -> str:
    """고정 소수점 (음수 0 방지)"""
    text = f"{value:.{precision}f}"
    if text.startswith('-') and float(text) == 0:
        text = text[1:]
    return text


def escape_pdf_string(text: str) -> str:
    """리터럴 문자열 이스케이프: ( ) \\"""
    result = []
    for ch in text:
        if ch in '()\\':
            result.append('\\')
        result.append(ch)
    return ''.join(result)


class ContentStreamRenderer:
    """Content Stream 생성기"""

    FONT_RESOURCE = "F1"

    def __init__(self, precision: int = 2):
        self.precision = precision

    def render(self, page: Page) -> bytes:
        """페이지 하나를 content stream 바이트로"""
        lines: List[str] = []

        # 초기 그래픽 상태
        lines.append("q")
        lines.append("1 0 0 1 0 0 cm")  # 단위 행렬
        lines.append("0 0 0 RG")        # 선 색: 검정
        lines.append("0 0 0 rg")        # 채움 색: 검정
        lines.append("1 w")
        lines.append("1 J")             # round cap
        lines.append("1 j")             # round join

        lines.extend(self._render_paths(page.paths))

        if page.texts:
            lines.extend(self._render_texts(page.texts))

        lines.append("Q")

        return ('\n'.join(lines) + '\n').encode('latin-1', errors='replace')

    def _num(self, value: float) -> str:
        return format_number(value, self.precision)

    def _render_paths(self, paths: List[PathElement]) -> List[str]:
        lines = []
        has_open_path = False

        for element in paths:
            if element.op == PathOp.MOVE_TO:
                if has_open_path:
                    lines.append("S")  # 이전 경로 그리기
                x, y = element.points
                lines.append(f"{self._num(x)} {self._num(y)} m")
                has_open_path = True

            elif element.op == PathOp.LINE_TO:
                x, y = element.points
                lines.append(f"{self._num(x)} {self._num(y)} l")
                has_open_path = True

            elif element.op == PathOp.CURVE_TO:
                lines.append(' '.join(self._num(v) for v in element.points) + " c")
                has_open_path = True

            elif element.op == PathOp.CLOSE_PATH:
                lines.append("h")

        if has_open_path:
            lines.append("S")

        return lines

    def _render_texts(self, texts: List[TextElement]) -> List[str]:
        lines = ["BT"]
        current_size = None

        for item in texts:
            # 폰트는 한 번만 (크기가 바뀔 때만 다시)
            if item.font_size != current_size:
                lines.append(f"/{self.FONT_RESOURCE} {self._num(item.font_size)} Tf")
                current_size = item.font_size

            r, g, b = item.color
            lines.append(f"{self._num(r)} {self._num(g)} {self._num(b)} rg")
            lines.append(f"1 0 0 1 {self._num(item.x)} {self._num(item.y)} Tm")
            lines.append(f"({escape_pdf_string(item.text)}) Tj")

        lines.append("ET")
        return lines
