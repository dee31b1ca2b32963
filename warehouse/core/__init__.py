# warehouse/core/__init__.py
