"""예외 정의."""


class ArenaLensError(Exception):
    """arena-lens 기본 예외."""


class FetchError(ArenaLensError):
    """업스트림 API에서 프로젝트를 가져오지 못했다."""


class RateLimitError(FetchError):
    """레이트 리밋에 걸렸다."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class AuthError(FetchError):
    """인증 실패 (401). 재시도하지 않는다."""


class UpstreamTimeoutError(FetchError):
    """업스트림 호출이 제한 시간을 넘겼다."""


class CacheEmptyError(ArenaLensError):
    """사용 가능한 캐시 데이터가 없다."""
