# warehouse/domains/apt/__init__.py
