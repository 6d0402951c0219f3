from pathlib import Path

import click

from venti_deployment.types import ChecksumAddress, MinInt, UnmatchedDepositsPolicy

params_option = click.option(
    "--params",
    "-p",
    "params_filepath",
    help="Migration parameters YAML file",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=True,
)

stakers_option = click.option(
    "--stakers",
    "-s",
    "stakers_filepath",
    help="Primary staker snapshot CSV (account,staked,timestamp,lock,paid); overrides params file.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=False,
)

deposits_option = click.option(
    "--deposits",
    "-e",
    "deposits_filepath",
    help="Supplemental deposits CSV (account,extra); overrides params file.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=False,
)

max_batch_size_option = click.option(
    "--max-batch-size",
    "-m",
    help="Maximum number of stakers per transaction; overrides params file.",
    type=MinInt(1),
    required=False,
)

batch_count_option = click.option(
    "--batch-count",
    "-n",
    help="Number of batches; derived from the maximum batch size if omitted.",
    type=MinInt(1),
    required=False,
)

start_batch_option = click.option(
    "--start-batch",
    "-b",
    help="Index of the first batch to submit, to resume an interrupted migration.",
    type=MinInt(0),
    default=0,
)

unmatched_option = click.option(
    "--unmatched",
    "-u",
    help="Handling of supplemental deposits without a matching staker; overrides params file.",
    type=UnmatchedDepositsPolicy(),
    required=False,
)

stake_address_option = click.option(
    "--stake-address",
    "-c",
    help="Address of the staking contract; looked up in the registry if omitted.",
    type=ChecksumAddress(),
    required=False,
)

autosign_option = click.option(
    "--autosign",
    help="Sign transactions without prompting.",
    is_flag=True,
    default=False,
)

export_option = click.option(
    "--export",
    "-x",
    "export_filepath",
    help="Write the merged staker snapshot to this CSV before submitting.",
    type=click.Path(dir_okay=False, path_type=Path),
    required=False,
)
