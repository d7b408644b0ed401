"""src/ssforecast/common/__init__.py"""
