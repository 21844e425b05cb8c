"""
에러 처리

- ErrorCode: 치명적/복구 가능한 오류 분류
- LitPSError 계열 예외: 코어 내부에서 발생, 경계(parse/generate)에서 잡아서 변환
- ErrorSink: 호출자가 넘겨주는 오류/로그 수집기 (전역 상태 없음)
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional, Tuple

logger = logging.getLogger('litps')


class ErrorCode(IntEnum):
    """오류 코드"""
    NONE = 0
    INPUT_UNREADABLE = -1
    MALFORMED_TOKEN = -2
    MALFORMED_OPERATOR = -3
    OUTPUT_UNWRITABLE = -4
    INVALID_ARGUMENT = -5


class Severity(Enum):
    """로그 심각도"""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    FATAL = logging.CRITICAL


class LitPSError(Exception):
    """LitPS 기본 예외"""
    code = ErrorCode.NONE
    fatal = True


class InputUnreadable(LitPSError):
    """입력 파일을 열거나 읽을 수 없음"""
    code = ErrorCode.INPUT_UNREADABLE


class MalformedToken(LitPSError):
    """토큰화 실패 (닫히지 않은 문자열 등) - 해당 줄만 건너뜀"""
    code = ErrorCode.MALFORMED_TOKEN
    fatal = False


class MalformedOperator(LitPSError):
    """피연산자 개수/타입 오류 - 해당 연산자만 건너뜀"""
    code = ErrorCode.MALFORMED_OPERATOR
    fatal = False


class OutputUnwritable(LitPSError):
    """출력 파일을 쓸 수 없음"""
    code = ErrorCode.OUTPUT_UNWRITABLE


@dataclass
class ErrorInfo:
    code: ErrorCode
    message: str


@dataclass
class ErrorSink:
    """
    오류 수집기

    치명적 오류는 set_error()로, 경고/정보는 log()로 기록한다.
    log()는 'litps' 로거로도 전달된다.
    """
    errors: List[ErrorInfo] = field(default_factory=list)
    messages: List[Tuple[str, Severity]] = field(default_factory=list)
    logger: logging.Logger = field(default=logger, repr=False)

    def set_error(self, code: ErrorCode, message: str):
        self.errors.append(ErrorInfo(ErrorCode(code), message))
        self.logger.error("%s (%s)", message, ErrorCode(code).name)

    def log(self, message: str, severity: Severity = Severity.INFO):
        self.messages.append((message, severity))
        self.logger.log(severity.value, message)

    def report(self, exc: LitPSError):
        """예외를 심각도에 맞게 기록"""
        if exc.fatal:
            self.set_error(exc.code, str(exc))
        else:
            self.log(str(exc), Severity.WARNING)

    @property
    def has_error(self) -> bool:
        return bool(self.errors)

    @property
    def last_error(self) -> Optional[ErrorInfo]:
        return self.errors[-1] if self.errors else None

    @property
    def warnings(self) -> List[str]:
        return [msg for msg, sev in self.messages if sev == Severity.WARNING]

    def clear(self):
        self.errors.clear()
        self.messages.clear()
