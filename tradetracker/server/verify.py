"""Checks that a deployment has everything the proxy needs before it is started: the static
asset directory with the dashboard document, the logging config, the environment example and
credentials.
"""
import os
from pathlib import Path
from typing import List, NamedTuple

from tradetracker import bitlogging
from tradetracker.config import ProxyConfig
from tradetracker.settings import LOG_CONFIG_FILE, Defaults, EnvVars


log = bitlogging.getLogger(__name__)


DASHBOARD_ASSETS = ('script.js', 'styles.css')
ENV_EXAMPLE = '.env.example'


class Check(NamedTuple):
    message: str
    passed: bool
    warning: bool = False


class VerificationReport(object):

    def __init__(self):
        self.checks = []  # type: List[Check]

    def check(self, condition: bool, message: str, warning: bool = False) -> bool:
        self.checks.append(Check(message, bool(condition), warning))
        return bool(condition)

    @property
    def passed(self) -> List[Check]:
        return [c for c in self.checks if c.passed]

    @property
    def failed(self) -> List[Check]:
        return [c for c in self.checks if not c.passed and not c.warning]

    @property
    def warnings(self) -> List[Check]:
        return [c for c in self.checks if not c.passed and c.warning]

    @property
    def ok(self) -> bool:
        return not self.failed

    def lines(self) -> List[str]:
        marks = {True: 'OK  ', False: 'FAIL'}
        out = []
        for c in self.checks:
            mark = 'WARN' if c.warning and not c.passed else marks[c.passed]
            out.append(f'[{mark}] {c.message}')
        out.append(f'{len(self.passed)} passed, {len(self.failed)} failed, {len(self.warnings)} warnings')
        return out


def verify_deployment(config: ProxyConfig) -> VerificationReport:
    report = VerificationReport()

    public_dir = Path(config.public_dir)
    if report.check(public_dir.is_dir(), f'Static asset directory: {public_dir}'):
        report.check((public_dir/Defaults.DASHBOARD_DOCUMENT).is_file(),
                     f'Dashboard document: {Defaults.DASHBOARD_DOCUMENT}')
        for asset in DASHBOARD_ASSETS:
            report.check((public_dir/asset).is_file(), f'Static asset: {asset}', warning=True)

    log_config = Path(os.environ.get(EnvVars.LOG_CONFIG) or LOG_CONFIG_FILE)
    report.check(log_config.is_file(), f'Logging config: {log_config}')

    env_example = public_dir.parent/ENV_EXAMPLE
    report.check(env_example.is_file(), f'Environment example: {env_example}', warning=True)

    report.check(bool(config.api_key), f'{EnvVars.API_KEY} is set', warning=True)
    report.check(bool(config.api_secret), f'{EnvVars.SECRET_KEY} is set', warning=True)
    report.check(True, 'Network: {}'.format('testnet' if config.use_testnet else 'mainnet'))

    log.info('Deployment verification: {passed} passed, {failed} failed, {warnings} warnings',
             event_name='verify.done',
             event_data={'passed': len(report.passed), 'failed': len(report.failed),
                         'warnings': len(report.warnings)})
    return report
