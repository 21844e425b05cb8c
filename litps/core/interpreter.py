"""
PostScript Subset Interpreter

그래픽 상태 머신 + 경로 빌더. 줄 단위로 토큰을 읽고
각 연산자는 같은 줄의 앞쪽 토큰을 피연산자로 사용한다 (피연산자 스택 없음).

지원 연산자 (긴 이름 / 축약형):
- 그래픽 상태: gsave q, grestore Q, setlinewidth w, setrgbcolor rg RG, setgray g G
- 경로: moveto m, lineto l, curveto c, rmoveto, rlineto, closepath h, newpath n
- 칠하기: stroke s S, fill f F f* eofill
- 텍스트: show Tj, findfont, scalefont, setfont, selectfont
- 페이지: showpage
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..errors import (
    ErrorSink, InputUnreadable, MalformedOperator, MalformedToken, Severity
)
from ..options import ConversionOptions
from .model import BoundingBox, Page, PageModel, PathElement, PathOp, TextElement
from .tokenizer import PSLexer, PSToken, PSTokenType, extract_dsc_header, split_lines
from .transform import CoordinateTransform

logger = logging.getLogger(__name__)


# 축약형 → 대표 이름
OPERATOR_ALIASES = {
    'q': 'gsave',
    'Q': 'grestore',
    'w': 'setlinewidth',
    'rg': 'setrgbcolor',
    'RG': 'setrgbcolor',
    'g': 'setgray',
    'G': 'setgray',
    'm': 'moveto',
    'l': 'lineto',
    'c': 'curveto',
    'h': 'closepath',
    'n': 'newpath',
    's': 'stroke',
    'S': 'stroke',
    'f': 'fill',
    'F': 'fill',
    'f*': 'fill',
    'eofill': 'fill',
    'Tj': 'show',
}


@dataclass
class GraphicsState:
    """그래픽 상태 (gsave 시 통째로 복사)"""
    x: float = 0.0
    y: float = 0.0
    line_width: float = 1.0
    color: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    font_name: str = "Helvetica"
    font_size: float = 12.0
    matrix: List[float] = field(default_factory=lambda: [1.0, 0.0, 0.0, 1.0, 0.0, 0.0])
    has_current_point: bool = False
    subpath_start: Tuple[float, float] = (0.0, 0.0)

    def copy(self) -> 'GraphicsState':
        return GraphicsState(
            x=self.x,
            y=self.y,
            line_width=self.line_width,
            color=self.color,
            font_name=self.font_name,
            font_size=self.font_size,
            matrix=self.matrix.copy(),
            has_current_point=self.has_current_point,
            subpath_start=self.subpath_start,
        )


class PostScriptParser:
    """
    PostScript 서브셋 파서

    인스턴스 하나가 변환 하나를 담당한다 (내부 상태가 있으므로 재사용/공유 금지).

    사용법:
        parser = PostScriptParser(options)
        model, ok = parser.parse(text, sink)
    """

    def __init__(self, options: ConversionOptions = None):
        self.options = options or ConversionOptions()
        self._reset()

    def _reset(self):
        self.model = PageModel()
        self.state = GraphicsState()
        self.state_stack: List[GraphicsState] = []
        self.current_path: List[PathElement] = []
        self.current_page = self._new_page()
        self.sealed_pages = 0
        self.transform = CoordinateTransform(
            page_width=self.options.page_width,
            page_height=self.options.page_height,
        )
        self._sink: Optional[ErrorSink] = None

    def _new_page(self) -> Page:
        return Page(width=self.options.page_width, height=self.options.page_height)

    # =========================================================================
    # 진입점
    # =========================================================================

    def parse_file(self, filepath: str, sink: ErrorSink) -> Tuple[Optional[PageModel], bool]:
        """PostScript 파일 파싱 (읽기 실패만 치명적)"""
        try:
            text = read_source(filepath)
        except InputUnreadable as e:
            sink.report(e)
            return None, False

        sink.log(f"Parsing PostScript file: {filepath} ({len(text)} characters)", Severity.DEBUG)
        return self.parse(text, sink)

    def parse(self, text: str, sink: ErrorSink) -> Tuple[PageModel, bool]:
        """
        PostScript 텍스트 파싱

        Returns:
            (PageModel, 성공 여부) - 잘못된 줄은 경고만 남기고 건너뛰므로 항상 성공
        """
        self._reset()
        self._sink = sink

        lines = split_lines(text)

        # 1. DSC 헤더
        header = extract_dsc_header(lines)
        self.model.title = header.title
        self.model.creator = header.creator
        self.model.bbox = header.bbox
        self.model.dsc_compliant = header.dsc_compliant
        for message in header.warnings:
            self._warn(message)

        # 2. 좌표 변환 (한 번만 계산)
        self._setup_transform(header.bbox)

        # 3. 명령 해석
        for line_no, line in enumerate(lines, 1):
            self._parse_line(line, line_no)

        # 4. 마지막 페이지 처리
        self._finish()

        sink.log(
            f"PostScript parsing completed: {self.model.page_count} page(s), "
            f"{len(self.model.warnings)} warning(s)",
            Severity.INFO,
        )
        self._sink = None
        return self.model, True

    def _setup_transform(self, bbox: BoundingBox):
        width, height = self.options.page_width, self.options.page_height
        try:
            self.transform = CoordinateTransform.from_bbox(bbox, width, height)
        except ValueError as e:
            self._warn(f"{e}; using default page box")
            self.transform = CoordinateTransform.from_bbox(BoundingBox(), width, height)

        logger.debug(
            "Coordinate transform: scale=%.4f offset=(%.3f, %.3f)",
            self.transform.scale, self.transform.offset_x, self.transform.offset_y,
        )

    def _finish(self):
        """입력 끝: 남은 경로 폐기, 마지막 페이지 봉인 여부 결정"""
        self._discard_pending_path("end of input")

        # 내용 없는 마지막 페이지는 이미 봉인된 페이지가 있으면 버린다
        if not self.current_page.is_empty or self.sealed_pages == 0:
            self.model.add_page(self.current_page)

    # =========================================================================
    # 줄 / 연산자 처리
    # =========================================================================

    def _parse_line(self, line: str, line_no: int):
        stripped = line.strip()

        # 빈 줄, 주석
        if not stripped or stripped.startswith('%'):
            return

        try:
            tokens = PSLexer(stripped).tokenize()
        except MalformedToken as e:
            self._warn(f"Line {line_no}: {e}; line skipped")
            return

        for index, token in enumerate(tokens):
            if token.type != PSTokenType.OPERATOR:
                continue
            try:
                self._execute_operator(token.value, tokens, index)
            except MalformedOperator as e:
                self._warn(f"Line {line_no}: {e}")
            except (ValueError, ArithmeticError) as e:
                self._warn(f"Line {line_no}: error in '{token.value}': {e}")

    def _execute_operator(self, op: str, tokens: List[PSToken], index: int):
        """연산자 실행"""
        name = OPERATOR_ALIASES.get(op, op)

        # 그래픽 상태
        if name == 'gsave':
            self.state_stack.append(self.state.copy())
        elif name == 'grestore':
            if self.state_stack:
                self.state = self.state_stack.pop()
            else:
                logger.debug("grestore with empty state stack ignored")

        elif name == 'setlinewidth':
            (width,) = self._numbers(op, tokens, index, 1)
            if not 0 <= width < math.inf:
                raise MalformedOperator(f"'{op}' needs a non-negative width, got {width:g}")
            self.state.line_width = width

        elif name == 'setrgbcolor':
            r, g, b = self._numbers(op, tokens, index, 3)
            self.state.color = (_clamp(r), _clamp(g), _clamp(b))

        elif name == 'setgray':
            (gray,) = self._numbers(op, tokens, index, 1)
            gray = _clamp(gray)
            self.state.color = (gray, gray, gray)

        # 경로 구성
        elif name == 'moveto':
            x, y = self._point(op, *self._numbers(op, tokens, index, 2))
            self._move_to(x, y)

        elif name == 'lineto':
            x, y = self._point(op, *self._numbers(op, tokens, index, 2))
            self._line_to(x, y)

        elif name == 'rmoveto':
            dx, dy = self.transform.apply_delta(*self._numbers(op, tokens, index, 2))
            self._require_current_point(op)
            self._move_to(*_finite(op, self.state.x + dx, self.state.y + dy))

        elif name == 'rlineto':
            dx, dy = self.transform.apply_delta(*self._numbers(op, tokens, index, 2))
            self._require_current_point(op)
            self._line_to(*_finite(op, self.state.x + dx, self.state.y + dy))

        elif name == 'curveto':
            x1, y1, x2, y2, x3, y3 = self._numbers(op, tokens, index, 6)
            x1, y1 = self._point(op, x1, y1)
            x2, y2 = self._point(op, x2, y2)
            x3, y3 = self._point(op, x3, y3)
            self.current_path.append(PathElement.curve_to(x1, y1, x2, y2, x3, y3))
            self._set_current_point(x3, y3)

        elif name == 'closepath':
            self.current_path.append(PathElement.close_path())
            if self.state.has_current_point:
                self._set_current_point(*self.state.subpath_start)

        elif name == 'newpath':
            self.current_path = []

        # 칠하기: 대기 중인 경로를 페이지로
        elif name in ('stroke', 'fill'):
            if self.current_path:
                self.current_page.paths.extend(self.current_path)
                self.current_path = []

        # 텍스트
        elif name == 'show':
            text = self._string_operand(op, tokens, index)
            self._require_current_point(op)
            self.current_page.texts.append(TextElement(
                text=text,
                x=self.state.x,
                y=self.state.y,
                font_name=self.state.font_name,
                font_size=self.state.font_size,
                color=self.state.color,
            ))

        elif name == 'findfont':
            self.state.font_name = self._name_operand(op, tokens, index - 1)

        elif name == 'scalefont':
            (size,) = self._numbers(op, tokens, index, 1)
            if not 0 < size < math.inf:
                raise MalformedOperator(f"'{op}' needs a positive size, got {size:g}")
            self.state.font_size = size

        elif name == 'selectfont':
            font_name = self._name_operand(op, tokens, index - 2)
            (size,) = self._numbers(op, tokens, index, 1)
            if not 0 < size < math.inf:
                raise MalformedOperator(f"'{op}' needs a positive size, got {size:g}")
            self.state.font_name = font_name
            self.state.font_size = size

        elif name == 'setfont':
            pass

        # 페이지
        elif name == 'showpage':
            self._show_page()

        else:
            logger.debug("Ignoring unsupported operator %r", op)

    # =========================================================================
    # 상태 변경
    # =========================================================================

    def _set_current_point(self, x: float, y: float):
        self.state.x = x
        self.state.y = y
        self.state.has_current_point = True

    def _move_to(self, x: float, y: float):
        self.current_path.append(PathElement.move_to(x, y))
        self._set_current_point(x, y)
        self.state.subpath_start = (x, y)

    def _line_to(self, x: float, y: float):
        self.current_path.append(PathElement.line_to(x, y))
        self._set_current_point(x, y)

    def _point(self, op: str, x: float, y: float) -> Tuple[float, float]:
        return _finite(op, *self.transform.apply(x, y))

    def _require_current_point(self, op: str):
        if not self.state.has_current_point:
            raise MalformedOperator(f"'{op}' without a current point")

    def _discard_pending_path(self, where: str):
        """칠하지 않은 경로 폐기 (moveto만 있으면 텍스트 위치 지정이므로 조용히)"""
        if any(element.op != PathOp.MOVE_TO for element in self.current_path):
            self._warn(f"Discarding unpainted path ({len(self.current_path)} elements) at {where}")
        self.current_path = []

    def _show_page(self):
        """현재 페이지 봉인, 새 페이지 시작"""
        self._discard_pending_path("showpage")

        self.model.add_page(self.current_page)
        self.sealed_pages += 1
        self.current_page = self._new_page()
        logger.debug("showpage: sealed page %d", self.sealed_pages)

    # =========================================================================
    # 피연산자
    # =========================================================================

    def _numbers(self, op: str, tokens: List[PSToken], index: int, count: int) -> List[float]:
        """연산자 바로 앞의 숫자 count개"""
        if index < count:
            raise MalformedOperator(f"'{op}' expects {count} numeric operand(s), got {index}")
        operands = tokens[index - count:index]
        for token in operands:
            if not token.is_number:
                raise MalformedOperator(
                    f"'{op}' expects {count} numeric operand(s), got {token.raw!r}"
                )
        return [token.value for token in operands]

    def _string_operand(self, op: str, tokens: List[PSToken], index: int) -> str:
        if index < 1 or not tokens[index - 1].is_string:
            raise MalformedOperator(f"'{op}' expects a string operand")
        return tokens[index - 1].value

    def _name_operand(self, op: str, tokens: List[PSToken], position: int) -> str:
        if position < 0 or tokens[position].type != PSTokenType.NAME:
            raise MalformedOperator(f"'{op}' expects a font name operand")
        return tokens[position].value

    def _warn(self, message: str):
        self.model.warnings.append(message)
        if self._sink is not None:
            self._sink.log(message, Severity.WARNING)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _finite(op: str, x: float, y: float) -> Tuple[float, float]:
    if not (math.isfinite(x) and math.isfinite(y)):
        raise MalformedOperator(f"'{op}' point out of range after transform")
    return x, y


def read_source(filepath: str) -> str:
    """PostScript 파일 읽기 (UTF-8, 실패하면 latin-1)"""
    try:
        with open(filepath, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise InputUnreadable(f"Cannot open PostScript file: {filepath} ({e.strerror or e})") from e

    try:
        return data.decode('utf-8')
    except UnicodeDecodeError:
        return data.decode('latin-1')


def parse_postscript(text: str, options: ConversionOptions = None,
                     sink: ErrorSink = None) -> PageModel:
    """편의 함수: 텍스트 -> PageModel"""
    model, _ = PostScriptParser(options).parse(text, sink or ErrorSink())
    return model
