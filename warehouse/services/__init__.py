# warehouse/services/__init__.py

# 외부 연동 서비스 (메일 발송 등)
