import json

import click
from dotenv import find_dotenv, load_dotenv

from tradetracker import bitlogging
from tradetracker.aggregator import TradeAggregator, default_window
from tradetracker.config import ProxyConfig
from tradetracker.exchanges import get_exchange
from tradetracker.exchanges.errors import TrackerError
from tradetracker.server import create_app
from tradetracker.server.verify import verify_deployment
from tradetracker.settings import Defaults


@click.group()
@click.option('-d', '--debug', is_flag=True)
@click.option('--env-file', type=click.Path(dir_okay=False),
              help='Defaults to the nearest .env at or above the working directory')
@click.pass_context
def tracker(ctx, debug: bool, env_file: str):
    env_file = env_file or find_dotenv(usecwd=True)
    if env_file:
        load_dotenv(env_file)
    config = ProxyConfig.from_env()
    bitlogging.configure(debug=debug, secrets=[config.api_secret])
    ctx.obj = {'config': config}


@tracker.command()
@click.option('--host', default='127.0.0.1')
@click.option('--port', type=int, default=Defaults.SERVER_PORT)
@click.option('--workers', type=int, default=1, help='Symbols fetched concurrently when aggregating')
@click.pass_obj
def serve(obj, host: str, port: int, workers: int):
    app = create_app(obj['config'], workers=workers)
    app.run(host=host, port=port)


@tracker.command()
@click.pass_obj
def verify(obj):
    report = verify_deployment(obj['config'])
    for line in report.lines():
        click.echo(line)
    if not report.ok:
        raise SystemExit(1)


@tracker.command()
@click.option('--start', type=int, help='Window start, epoch milliseconds')
@click.option('--end', type=int, help='Window end, epoch milliseconds')
@click.option('--aggregate', is_flag=True)
@click.option('--limit', type=click.IntRange(Defaults.MIN_LIMIT, Defaults.MAX_LIMIT), default=Defaults.TRADES_LIMIT)
@click.option('--workers', type=int, default=1)
@click.pass_obj
def trades(obj, start: int, end: int, aggregate: bool, limit: int, workers: int):
    api = get_exchange(obj['config'])
    try:
        if start is None and end is None and not aggregate:
            result = api.recent_trades(limit)
        else:
            result = TradeAggregator(api, max_workers=workers).aggregate(default_window(start, end))
    except TrackerError as e:
        raise click.ClickException(json.dumps(e.to_dict()))
    click.echo(json.dumps(result, indent=2))
