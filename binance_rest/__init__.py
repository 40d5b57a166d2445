"""
Binance REST API client

An asyncio client for the Binance REST API: public market data and
signed account/trading endpoints.
"""

__version__ = "0.1.0"
__author__ = "binance-rest contributors"
