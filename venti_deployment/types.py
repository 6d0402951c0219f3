import click
from eth_utils import to_checksum_address

from venti_deployment.merge import UnmatchedDeposits


class MinInt(click.ParamType):
    name = "minint"

    def __init__(self, min_value):
        self.min_value = min_value

    def convert(self, value, param, ctx):
        try:
            ivalue = int(value)
        except ValueError:
            self.fail(f"{value} is not a valid integer", param, ctx)
        if ivalue < self.min_value:
            self.fail(
                f"{value} is less than the minimum allowed value of {self.min_value}", param, ctx
            )
        return ivalue


class ChecksumAddress(click.ParamType):
    name = "checksum_address"

    def convert(self, value, param, ctx):
        try:
            value = to_checksum_address(value=value)
        except ValueError:
            self.fail(f"{value} is not a valid ethereum address", param, ctx)
        else:
            return value


class UnmatchedDepositsPolicy(click.Choice):
    """Choice of the unmatched supplemental deposit policy, converted to the enum."""

    def __init__(self):
        super().__init__([policy.value for policy in UnmatchedDeposits])

    def convert(self, value, param, ctx):
        if isinstance(value, UnmatchedDeposits):
            return value
        return UnmatchedDeposits(super().convert(value, param, ctx))
