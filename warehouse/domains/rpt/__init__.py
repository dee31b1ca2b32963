# warehouse/domains/rpt/__init__.py
