# warehouse/domains/usr/__init__.py
