"""
LitPS - Lightweight PostScript to PDF Converter

PostScript 서브셋(경로, 텍스트, 그래픽 상태, showpage)을 최소한의 PDF로 변환
- 외부 라이브러리/인터프리터 없이 순수 Python으로 구현
- 일반 PostScript 실행(스택, 프로시저, 반복문)은 지원하지 않음

사용법:
    from litps import convert, parse_ps, generate_pdf

    # 파일 변환
    result = convert('drawing.ps', 'drawing.pdf')
    print(result.success, result.page_count)

    # 단계별
    model, ok = parse_ps('drawing.ps')
    pdf_bytes, ok = generate_pdf(model)

    # 오류/경고 수집
    sink = ErrorSink()
    result = convert('drawing.ps', 'drawing.pdf', sink=sink)
    for message, severity in sink.messages:
        print(severity.name, message)
"""
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union
from dataclasses import dataclass, field

from .options import ConversionOptions, PAPER_SIZES, VERSION
from .errors import (
    ErrorCode, ErrorInfo, ErrorSink, Severity,
    LitPSError, InputUnreadable, MalformedToken, MalformedOperator, OutputUnwritable
)
from .core import (
    PageModel, Page, PathElement, PathOp, TextElement, BoundingBox,
    PostScriptParser, CoordinateTransform, GraphicsState,
    PDFObjectBuilder, PDFWriter, ContentStreamRenderer,
    generate, write_pdf, verify_pdf, read_pdf
)

__version__ = VERSION
__all__ = [
    # 통합 API
    'convert', 'convert_files', 'parse_ps', 'generate_pdf', 'ConversionResult',
    # Options / Errors
    'ConversionOptions', 'PAPER_SIZES',
    'ErrorCode', 'ErrorInfo', 'ErrorSink', 'Severity',
    'LitPSError', 'InputUnreadable', 'MalformedToken', 'MalformedOperator', 'OutputUnwritable',
    # Core
    'PageModel', 'Page', 'PathElement', 'PathOp', 'TextElement', 'BoundingBox',
    'PostScriptParser', 'CoordinateTransform', 'GraphicsState',
    'PDFObjectBuilder', 'PDFWriter', 'ContentStreamRenderer',
    'write_pdf', 'verify_pdf', 'read_pdf',
]

ProgressCallback = Callable[[int, int, str], None]


# =============================================================================
# 변환 결과
# =============================================================================

@dataclass
class ConversionResult:
    """파일 하나의 변환 결과"""
    input_path: str = ""
    output_path: str = ""
    success: bool = False
    page_count: int = 0
    pdf_size: int = 0
    warnings: List[str] = field(default_factory=list)
    error: Optional[ErrorInfo] = None

    # 파싱된 페이지 모델 (고급 사용)
    model: Optional[PageModel] = field(default=None, repr=False)


# =============================================================================
# 통합 API
# =============================================================================

def parse_ps(
    filepath_or_bytes: Union[str, Path, bytes],
    options: ConversionOptions = None,
    sink: ErrorSink = None,
) -> Tuple[Optional[PageModel], bool]:
    """
    PostScript 파싱

    Args:
        filepath_or_bytes: 파일 경로 또는 바이트 데이터
        options: 변환 옵션 (대상 페이지 크기)
        sink: 오류 수집기

    Returns:
        (PageModel, 성공 여부) - 파일을 읽을 수 없을 때만 (None, False)
    """
    sink = sink if sink is not None else ErrorSink()
    parser = PostScriptParser(options)

    if isinstance(filepath_or_bytes, bytes):
        try:
            text = filepath_or_bytes.decode('utf-8')
        except UnicodeDecodeError:
            text = filepath_or_bytes.decode('latin-1')
        return parser.parse(text, sink)

    return parser.parse_file(str(filepath_or_bytes), sink)


def generate_pdf(
    model: PageModel,
    options: ConversionOptions = None,
    sink: ErrorSink = None,
) -> Tuple[bytes, bool]:
    """PageModel -> PDF 바이트"""
    return generate(model, options, sink)


def convert(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    options: ConversionOptions = None,
    sink: ErrorSink = None,
) -> ConversionResult:
    """
    PostScript 파일 -> PDF 파일

    Examples:
        result = convert('in.ps', 'out.pdf')
        result = convert('in.ps', 'out.pdf', ConversionOptions.for_paper('letter'))
    """
    options = options or ConversionOptions()
    sink = sink if sink is not None else ErrorSink()
    result = ConversionResult(input_path=str(input_path), output_path=str(output_path))

    model, ok = parse_ps(input_path, options, sink)
    if not ok:
        result.error = sink.last_error
        return result

    result.model = model
    result.page_count = model.page_count
    result.warnings = list(model.warnings)

    if not write_pdf(model, str(output_path), options, sink):
        result.error = sink.last_error
        return result

    result.pdf_size = Path(output_path).stat().st_size
    result.success = True
    return result


def convert_files(
    input_paths: List[Union[str, Path]],
    output_dir: Union[str, Path],
    options: ConversionOptions = None,
    sink: ErrorSink = None,
    progress: Optional[ProgressCallback] = None,
) -> List[ConversionResult]:
    """
    여러 파일 변환: 각 입력을 output_dir/<이름>.pdf 로

    progress(현재 번호, 전체 수, 입력 경로)는 파일마다 한 번 호출된다.
    """
    sink = sink if sink is not None else ErrorSink()
    output_dir = Path(output_dir)
    results = []
    total = len(input_paths)

    for index, input_path in enumerate(input_paths, 1):
        output_path = output_dir / (Path(input_path).stem + '.pdf')
        results.append(convert(input_path, output_path, options, sink))
        if progress is not None:
            progress(index, total, str(input_path))

    return results
