# warehouse/domains/ven/__init__.py
