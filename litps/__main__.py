"""
LitPS CLI

사용법:
    litps drawing.ps
    litps drawing.ps -o out.pdf --paper letter
    litps -sDEVICE=pdfwrite -sOutputFile=out.pdf -dBATCH -dNOPAUSE drawing.ps
    litps a.ps b.ps -o build/
    litps drawing.ps --info
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional

# Ghostscript 호환 옵션 -> argparse 옵션
GS_VALUE_OPTIONS = {
    '-sOutputFile=': '--output',
    '-sDEVICE=': '--device',
    '-sPAPERSIZE=': '--paper',
    '-dCompatibilityLevel=': '--compat',
}
GS_FLAGS = {
    '-dQUIET': '--quiet',
    '-q': '--quiet',
}
GS_IGNORED = {'-dBATCH', '-dNOPAUSE', '-dSAFER', '-dNOSAFER'}


def translate_gs_args(argv: List[str]) -> List[str]:
    """-sKEY=value / -dFLAG 형식을 일반 옵션으로 변환"""
    translated = []
    for arg in argv:
        if arg in GS_IGNORED:
            continue
        if arg in GS_FLAGS:
            translated.append(GS_FLAGS[arg])
            continue
        for prefix, option in GS_VALUE_OPTIONS.items():
            if arg.startswith(prefix):
                translated.extend([option, arg[len(prefix):]])
                break
        else:
            translated.append(arg)
    return translated


def build_parser() -> argparse.ArgumentParser:
    from . import __version__
    from .options import PAPER_SIZES

    parser = argparse.ArgumentParser(
        prog='litps',
        description='LitPS - Lightweight PostScript to PDF Converter',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
지원 연산자:
  moveto lineto curveto closepath rmoveto rlineto newpath stroke fill
  gsave grestore setlinewidth setrgbcolor setgray
  show findfont scalefont setfont selectfont showpage

Ghostscript 호환 옵션:
  -sDEVICE=pdfwrite -sOutputFile=<path> -sPAPERSIZE=<name>
  -dCompatibilityLevel=<x.y> -dBATCH -dNOPAUSE -dSAFER -dQUIET

예시:
  litps drawing.ps
  litps drawing.ps -o out.pdf --paper letter
  litps -sDEVICE=pdfwrite -sOutputFile=out.pdf drawing.ps
  litps drawing.ps --info
'''
    )

    parser.add_argument('files', nargs='+', help='PostScript 파일 경로')
    parser.add_argument('--output', '-o', help='출력 PDF 파일 (입력이 여러 개면 디렉토리)')
    parser.add_argument('--device', default='pdfwrite', help='출력 장치 (pdfwrite만 지원)')
    parser.add_argument('--paper', default='a4', choices=sorted(PAPER_SIZES),
                        type=str.lower, help='대상 용지 크기')
    parser.add_argument('--compat', type=float, default=1.7, help='PDF 호환성 레벨')
    parser.add_argument('--title', help='문서 제목 (DSC %%%%Title 대신)')
    parser.add_argument('--info', '-i', action='store_true', help='페이지 모델 정보만 출력')
    parser.add_argument('--json', '-j', action='store_true', help='페이지 모델을 JSON으로 출력')
    parser.add_argument('--check', action='store_true', help='생성된 PDF 구조 검증')
    parser.add_argument('--verbose', '-v', action='count', default=0, help='로그 자세히 (-vv: 디버그)')
    parser.add_argument('--quiet', action='store_true', help='오류만 출력')
    parser.add_argument('--version', action='version', version=f'LitPS {__version__}')
    return parser


def configure_logging(verbose: int, quiet: bool):
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format='%(levelname)s: %(message)s')


def resolve_outputs(inputs: List[Path], output: Optional[str]) -> List[Path]:
    """입력별 출력 경로 결정"""
    if output is None:
        return [path.with_suffix('.pdf') for path in inputs]

    target = Path(output)
    if len(inputs) > 1 or target.is_dir():
        target.mkdir(parents=True, exist_ok=True)
        return [target / (path.stem + '.pdf') for path in inputs]
    return [target]


def main(argv: List[str] = None) -> int:
    args = build_parser().parse_args(translate_gs_args(sys.argv[1:] if argv is None else argv))
    configure_logging(args.verbose, args.quiet)

    from . import parse_ps, ConversionOptions, ErrorSink
    from .core import write_pdf, verify_pdf
    from .output_formatter import to_json, to_summary

    if args.device != 'pdfwrite':
        print(f"오류: 지원하지 않는 장치: {args.device} (pdfwrite만 지원)", file=sys.stderr)
        return 1

    try:
        options = ConversionOptions.for_paper(args.paper, compatibility_level=args.compat,
                                              title=args.title)
    except ValueError as e:
        print(f"오류: {e}", file=sys.stderr)
        return 1

    inputs = [Path(f) for f in args.files]
    for path in inputs:
        if not path.exists():
            print(f"오류: 파일을 찾을 수 없습니다: {path}", file=sys.stderr)
            return 1

    try:
        outputs = resolve_outputs(inputs, args.output)
    except OSError as e:
        print(f"오류: 출력 디렉토리를 만들 수 없습니다: {e}", file=sys.stderr)
        return 1

    status = 0
    for index, (input_path, output_path) in enumerate(zip(inputs, outputs), 1):
        sink = ErrorSink()
        model, ok = parse_ps(input_path, options, sink)
        if not ok:
            print(f"오류: {sink.last_error.message}", file=sys.stderr)
            status = 1
            continue

        # 정보만 출력
        if args.info:
            print(to_summary(model, str(input_path)))
            continue
        if args.json:
            print(to_json(model))
            continue

        if not write_pdf(model, str(output_path), options, sink):
            print(f"오류: {sink.last_error.message}", file=sys.stderr)
            status = 1
            continue

        if args.check:
            problems = verify_pdf(output_path.read_bytes())
            for problem in problems:
                print(f"검증 실패: {output_path}: {problem}", file=sys.stderr)
            if problems:
                status = 1
                continue

        if not args.quiet:
            print(f"[{index}/{len(inputs)}] 저장됨: {output_path} "
                  f"({model.page_count}페이지, 경고 {len(model.warnings)}개)", file=sys.stderr)

    return status


if __name__ == '__main__':
    sys.exit(main())
