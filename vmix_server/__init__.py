"""
VMix data server - Excel upload and active row selection for vMix data sources
"""
__version__ = "1.0.1"
