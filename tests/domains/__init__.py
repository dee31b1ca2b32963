# tests/domains/__init__.py

"""
도메인별 API 테스트 모듈 패키지입니다.

- `test_usr_n.py`: 로그인, 가입 승인/거절, 사용자 삭제.
- `test_loc_n.py`, `test_ven_n.py`: 보관 장소, 공급업체 관리.
- `test_inv_n.py`: 분류, 품목, 입출고 기록, 파손 품목, 재고 부족 알림.
- `test_apt_n.py`: 입고 예약 등록/수정, 입고 완료, 취소.
- `test_rpt_n.py`: 활동 기록, 대시보드, 보고서.
"""
