from ape import networks

LOCAL_NETWORKS = ["local"]
FORK_SUFFIX = "-fork"


def is_fork_network() -> bool:
    return networks.provider.network.name.endswith(FORK_SUFFIX)


def is_local_network() -> bool:
    """True for the ephemeral test chain and for local forks of live networks."""
    network_name = networks.provider.network.name
    return network_name in LOCAL_NETWORKS or is_fork_network()
