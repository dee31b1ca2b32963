# warehouse/domains/__init__.py
