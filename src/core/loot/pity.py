"""전설 등급 천장(pity) 카운터"""

from dataclasses import dataclass


@dataclass
class PityCounter:
    """연속 실패마다 증가, 성공 시 0. 값은 [0, cap]."""

    increment: float = 0.05
    cap: float = 1.0
    value: float = 0.0

    def register_failure(self) -> float:
        # 누적 오차 방지를 위해 소수 6자리로 정규화
        self.value = min(round(self.value + self.increment, 6), self.cap)
        return self.value

    def register_success(self) -> None:
        self.value = 0.0

    def reset(self) -> None:
        self.value = 0.0

    def restore(self, value: float) -> None:
        """저장값 복원. 범위 밖 값은 [0, cap]으로 자른다."""
        self.value = max(0.0, min(float(value), self.cap))
