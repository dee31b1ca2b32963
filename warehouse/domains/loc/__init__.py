# warehouse/domains/loc/__init__.py
