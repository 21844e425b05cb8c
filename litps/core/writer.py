"""
PDF Writer - 객체 직렬화, XRef 테이블, Trailer

파일 구조:
    %PDF-1.7
    %âãÏÓ
    1 0 obj ... endobj
    ...
    xref
    0 N+1
    0000000000 65535 f
    OOOOOOOOOO 00000 n      (20바이트 고정)
    trailer << /Size /Root /Info >>
    startxref
    <xref 오프셋>
    %%EOF
"""

import io
import logging
import os
import tempfile
from typing import List, Optional, Tuple

from ..errors import ErrorSink, OutputUnwritable, Severity
from ..options import ConversionOptions
from .model import PageModel
from .pdf_objects import PDFObject, PDFObjectBuilder

logger = logging.getLogger(__name__)

BINARY_MARKER = b'%\xe2\xe3\xcf\xd3\n'


class PDFWriter:
    """객체 목록을 PDF 바이트로 직렬화"""

    def __init__(self, options: ConversionOptions = None):
        self.options = options or ConversionOptions()
        self.xref_offset = 0

    def write(self, objects: List[PDFObject], root_id: int,
              info_id: Optional[int] = None) -> bytes:
        out = io.BytesIO()

        # 1. 헤더
        out.write(f"%PDF-{self.options.compatibility_level:.1f}\n".encode('ascii'))
        out.write(BINARY_MARKER)

        # 2. 객체 (id 순서, 쓰기 직전 오프셋 기록)
        for obj in sorted(objects, key=lambda o: o.id):
            obj.offset = out.tell()
            out.write(f"{obj.id} 0 obj\n".encode('ascii'))
            out.write(obj.content)
            out.write(b"endobj\n\n")

        # 3. XRef
        self.xref_offset = out.tell()
        out.write(self._xref_table(objects))

        # 4. Trailer
        out.write(self._trailer(len(objects), root_id, info_id))

        return out.getvalue()

    def _xref_table(self, objects: List[PDFObject]) -> bytes:
        lines = [
            "xref\n",
            f"0 {len(objects) + 1}\n",
            "0000000000 65535 f \n",
        ]
        for obj in sorted(objects, key=lambda o: o.id):
            lines.append(f"{obj.offset:010d} 00000 n \n")
        return ''.join(lines).encode('ascii')

    def _trailer(self, count: int, root_id: int, info_id: Optional[int]) -> bytes:
        lines = [
            "trailer\n",
            "<<\n",
            f"/Size {count + 1}\n",
            f"/Root {root_id} 0 R\n",
        ]
        if info_id is not None:
            lines.append(f"/Info {info_id} 0 R\n")
        lines.extend([
            ">>\n",
            "startxref\n",
            f"{self.xref_offset}\n",
            "%%EOF\n",
        ])
        return ''.join(lines).encode('ascii')


def generate(model: PageModel, options: ConversionOptions = None,
             sink: ErrorSink = None) -> Tuple[bytes, bool]:
    """
    PageModel -> PDF 바이트

    Returns:
        (pdf 바이트, 성공 여부)
    """
    options = options or ConversionOptions()
    sink = sink if sink is not None else ErrorSink()

    graph = PDFObjectBuilder(options).build(model)
    data = PDFWriter(options).write(graph.objects, graph.catalog_id, graph.info_id)

    sink.log(
        f"Generated PDF: {model.page_count} page(s), {len(graph.objects)} objects, {len(data)} bytes",
        Severity.INFO,
    )
    return data, True


def write_pdf(model: PageModel, filepath: str, options: ConversionOptions = None,
              sink: ErrorSink = None) -> bool:
    """
    PDF 파일 쓰기

    같은 디렉토리의 임시 파일에 쓴 뒤 rename 한다.
    실패하면 임시 파일을 지우고 False (부분 파일을 남기지 않음).
    """
    sink = sink if sink is not None else ErrorSink()
    data, ok = generate(model, options, sink)
    if not ok:
        return False

    try:
        _atomic_write(filepath, data)
    except OutputUnwritable as e:
        sink.report(e)
        return False

    sink.log(f"PDF created successfully: {filepath}", Severity.INFO)
    return True


def _atomic_write(filepath: str, data: bytes):
    directory = os.path.dirname(os.path.abspath(filepath))
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(prefix='.litps-', suffix='.pdf.tmp', dir=directory)
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        os.chmod(tmp_path, 0o644)  # mkstemp은 0600으로 만든다
        os.replace(tmp_path, filepath)
        logger.debug("Wrote %d bytes to %s", len(data), filepath)
    except OSError as e:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise OutputUnwritable(f"Cannot create PDF file: {filepath} ({e.strerror or e})") from e
