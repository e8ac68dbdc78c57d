"""설정 관리 모듈."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """애플리케이션 설정."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Colosseum API
    colosseum_api_url: str = Field(
        default="https://api.colosseum.org/api/projects",
        description="프로젝트 목록 API URL",
    )
    hackathon_id: int = Field(default=4, description="해커톤 ID")
    project_limit: int = Field(default=1450, ge=1, description="한 번에 가져올 프로젝트 수")
    arena_base_url: str = Field(
        default="https://arena.colosseum.org/projects/explore",
        description="프로젝트 상세 페이지 기본 URL",
    )

    # 외부 호출 제어
    request_timeout: float = Field(default=30.0, gt=0, description="HTTP 타임아웃 (초)")
    rate_limit_delay: float = Field(
        default=2.0, ge=0, description="연속 API 호출 사이 대기 시간 (초)"
    )
    max_retries: int = Field(default=3, ge=1, description="최대 재시도 횟수")
    retry_delay_base: float = Field(
        default=5.0, ge=0, description="지수 백오프 기본 대기 시간 (초)"
    )

    # 로컬 저장소
    database_url: str = Field(
        default="sqlite:///projects_tracking.db",
        description="스냅샷 저장용 SQLAlchemy URL",
    )
    data_dir: Path = Field(default=Path("data"), description="JSON 캐시 디렉토리")
    export_dir: Path = Field(default=Path("."), description="내보내기 파일 디렉토리")

    # 검색 / 대시보드 상태
    search_cache_size: int = Field(default=20, ge=1, description="검색 결과 캐시 크기")
    stale_after_seconds: float = Field(
        default=60.0, gt=0, description="데이터를 오래된 것으로 판단하는 기준 (초)"
    )

    # 내부 API 서버
    server_host: str = Field(default="127.0.0.1", description="API 서버 호스트")
    server_port: int = Field(default=8300, description="API 서버 포트")
    api_fresh_seconds: float = Field(
        default=60.0, ge=0, description="API 응답 캐시 유지 시간 (초)"
    )
    api_error_cache_seconds: float = Field(
        default=30.0, ge=0, description="타임아웃 응답 캐시 유지 시간 (초)"
    )
    api_rate_limit_calls: int = Field(default=10, ge=1, description="윈도우당 허용 호출 수")
    api_rate_limit_window: float = Field(
        default=60.0, gt=0, description="레이트 리밋 윈도우 (초)"
    )

    # Supabase
    supabase_url: str | None = Field(default=None, description="Supabase URL")
    supabase_key: str | None = Field(default=None, description="Supabase anon key")


settings = Settings()
