# warehouse/domains/inv/__init__.py
