# warehouse/core/exceptions.py

"""
재고 원장(ledger) 작업에서 발생하는 도메인 예외를 정의하는 모듈입니다.

라우터는 이 예외를 직접 다루지 않으며, main.py에 등록된 예외 핸들러가
status_code 속성에 따라 HTTP 응답으로 변환합니다.
"""

from fastapi import status


class WarehouseError(Exception):
    """모든 도메인 예외의 기반 클래스."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(WarehouseError):
    """참조한 품목, 예약, 공급업체 또는 사용자가 존재하지 않음."""
    status_code = status.HTTP_404_NOT_FOUND


class ValidationFailure(WarehouseError):
    """필수 값 누락, 0 이하 수량, 재고 스냅샷 산술 불일치 등."""
    status_code = status.HTTP_400_BAD_REQUEST


class ConstraintConflict(WarehouseError):
    """고유 이름 중복 또는 참조 중인 행의 삭제 시도."""
    status_code = status.HTTP_409_CONFLICT


class StaleSnapshotError(ConstraintConflict):
    """요청의 stockBefore 값이 잠근 행의 현재 수량과 다름."""

    def __init__(self, item_id: int, expected: int, actual: int):
        super().__init__(
            f"Stale stock snapshot for item {item_id}: expected {expected}, current quantity is {actual}"
        )
        self.item_id = item_id
        self.expected = expected
        self.actual = actual


class InvalidStateTransition(ConstraintConflict):
    """종결 상태(completed/cancelled)의 예약에서 다른 상태로의 전이."""

    def __init__(self, appointment_id: int, current: str, target: str):
        super().__init__(f"Appointment {appointment_id} is {current} and cannot become {target}")
        self.appointment_id = appointment_id
        self.current = current
        self.target = target


class StoreFailure(WarehouseError):
    """원자 단위 실행 중 저장소 오류. 전체 롤백 후 전달됩니다."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
