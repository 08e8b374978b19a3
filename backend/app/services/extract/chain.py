# app/services/extract/chain.py
# 추출 휴리스틱 공통 뼈대
# - Strategy: 이름 + 함수(값 또는 None 반환)
# - run_chain: 순서대로 시도, 처음 "비어있지 않은" 결과 채택 (first success wins)
# - 각 전략은 독립 함수라 개별 테스트 가능

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Sequence, Tuple, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Strategy(Generic[T]):
    name: str
    fn: Callable[..., Optional[T]]

    def __call__(self, *args: Any) -> Optional[T]:
        return self.fn(*args)


def run_chain(
    strategies: Sequence[Strategy[T]], default: T, *args: Any
) -> Tuple[T, str]:
    """(결과, 채택된 전략 이름) 반환. 전부 실패하면 (default, "default")."""
    for st in strategies:
        try:
            out = st(*args)
        except Exception:
            # 휴리스틱 하나가 깨져도 다음 전략으로 진행 (추출기는 예외를 밖으로 내지 않는다)
            log.exception("extraction strategy %s failed", st.name)
            continue
        if out:
            return out, st.name
    return default, "default"
