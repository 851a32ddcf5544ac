from .binance import BinanceFuturesAPI as Binance


_exchange_map = {
    'binance': Binance,
}


def get_exchange(config, name: str = 'binance', session=None):
    """Gets the REST API adapter for the specified exchange, configured from ``config``.

    :param config: a ``ProxyConfig`` carrying credentials and network selection
    :param name: the name of the exchange
    :param session: optional ``requests.Session`` to send requests through
    """
    return _exchange_map[name.lower()].from_config(config, session=session)
