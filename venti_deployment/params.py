import typing
from abc import ABC, abstractmethod
from collections import OrderedDict
from pathlib import Path
from typing import Any, List

from ape import networks
from ape.api import AccountAPI, ReceiptAPI
from ape.contracts.base import ContractContainer, ContractInstance, ContractTransactionHandler
from ape.utils import ZERO_ADDRESS
from ethpm_types import MethodABI
from web3.auto import w3

from venti_deployment.confirm import _confirm_resolution, _continue
from venti_deployment.registry import registry_from_ape_deployments
from venti_deployment.utils import (
    _load_yaml,
    check_plugins,
    get_contract_container,
    validate_config,
    verify_contracts,
)

CONTRACT_CONSTRUCTOR_PARAMETER_KEY = "constructor"

# lists longer than this are summarized when printing transaction arguments
MAX_PRINTED_ITEMS = 3


class VariableContext:
    def __init__(
        self,
        contract_names: List[str],
        contract_name: str,
        constants: typing.Dict[str, Any] = None,
        deployer_address: typing.Optional[str] = None,
    ):
        self.contract_names = contract_names or list()
        self.contract_name = contract_name
        self.constants = constants or dict()
        self.deployer_address = deployer_address


# Variables


class Variable(ABC):
    VARIABLE_PREFIX = "$"

    @abstractmethod
    def resolve(self) -> Any:
        raise NotImplementedError

    @classmethod
    def is_variable(cls, param: Any) -> bool:
        """Returns True if the param is a variable."""
        return isinstance(param, str) and param.startswith(cls.VARIABLE_PREFIX)


class DeployerAccount(Variable):
    DEPLOYER_INDICATOR = "deployer"

    def __init__(self, context: VariableContext):
        self.address = context.deployer_address

    @classmethod
    def is_deployer(cls, value: str) -> bool:
        """Returns True if the variable is the special deployer variable."""
        return value == cls.DEPLOYER_INDICATOR

    def resolve(self) -> Any:
        # eager validation before an account is known
        return self.address or ZERO_ADDRESS


class Constant(Variable):
    def __init__(self, constant_name: str, context: VariableContext):
        try:
            self.constant_value = context.constants[constant_name]
        except KeyError:
            raise ValueError(f"Constant '{constant_name}' not found in deployment file.")

    @classmethod
    def is_constant(cls, value: str) -> bool:
        """Returns True if the variable is a deployment constant."""
        return value.isupper()

    def resolve(self) -> Any:
        return self.constant_value


class ContractName(Variable):
    def __init__(self, contract_name: str, context: VariableContext):
        if contract_name not in context.contract_names:
            raise ValueError(f"Contract name {contract_name} not found")
        self.contract_name = contract_name

    def resolve(self) -> Any:
        """Resolves the address of an already deployed contract."""
        contract_container = get_contract_container(self.contract_name)
        contract_instances = contract_container.deployments
        if not contract_instances:
            # not deployed yet - eager validation
            return ZERO_ADDRESS
        if len(contract_instances) != 1:
            raise ValueError(
                f"Variable {self.contract_name} is ambiguous - "
                f"expected exactly one contract instance, got {len(contract_instances)}"
            )
        return contract_instances[0].address


def _resolve_param(value: Any) -> Any:
    """Resolves a single parameter value or a list of parameter values."""
    if isinstance(value, list):
        return [_resolve_param(v) for v in value]

    if isinstance(value, Variable):
        return value.resolve()

    return value  # literally a value


def _resolve_params(parameters: OrderedDict) -> OrderedDict:
    resolved_parameters = OrderedDict()
    for name, value in parameters.items():
        resolved_parameters[name] = _resolve_param(value)
    return resolved_parameters


def _variable_from_value(variable: Any, context: VariableContext) -> Variable:
    variable = variable.strip(Variable.VARIABLE_PREFIX)
    if DeployerAccount.is_deployer(variable):
        return DeployerAccount(context)
    elif Constant.is_constant(variable):
        return Constant(variable, context)
    else:
        return ContractName(variable, context)


def _process_raw_value(value: Any, variable_context: VariableContext) -> Any:
    if isinstance(value, list):
        return [_process_raw_value(v, variable_context) for v in value]

    if Variable.is_variable(value):
        value = _variable_from_value(value, variable_context)

    return value


def _get_contract_names(config: typing.Dict) -> List[str]:
    contract_names = list()
    for contract_info in config["contracts"]:
        if isinstance(contract_info, str):
            contract_names.append(contract_info)
        elif isinstance(contract_info, dict):
            contract_names.extend(list(contract_info.keys()))
        else:
            raise ValueError("Malformed constructor parameters YAML.")
    return contract_names


def _abi_type(abi_input) -> str:
    # structs are only encodable by their canonical tuple type
    return getattr(abi_input, "canonical_type", None) or abi_input.type


def _validate_method_args(
    method_abis: List[MethodABI], args: typing.Sequence[Any]
) -> typing.Dict[str, Any]:
    """Validates the transaction arguments against the function ABI."""
    if len(method_abis) == 0:
        raise ValueError("No method abis provided for validation of args")

    abis_matching_args_length = [abi for abi in method_abis if len(abi.inputs) == len(args)]
    for abi in abis_matching_args_length:
        named_args = {}
        for arg, abi_input in zip(args, abi.inputs):
            if not w3.is_encodable(_abi_type(abi_input), arg):
                break
            named_args[abi_input.name] = arg
        else:
            return named_args
    raise ValueError(
        f"Could not find ABI for '{method_abis[0].name}' with {len(args)} arg(s) and given type(s)"
    )


def _validate_constructor_abi_inputs(
    contract_name: str,
    abi_inputs: List[Any],
    resolved_parameters: OrderedDict,
) -> None:
    """Validates the constructor parameters against the constructor ABI."""
    if len(resolved_parameters) != len(abi_inputs):
        raise ConstructorParameters.Invalid(
            f"Constructor parameters length mismatch - "
            f"{contract_name} ABI requires {len(abi_inputs)}, Got {len(resolved_parameters)}."
        )

    codex = enumerate(zip(abi_inputs, resolved_parameters.items()))
    for position, (abi_input, (name, value)) in codex:
        if not w3.is_encodable(_abi_type(abi_input), value):
            raise ConstructorParameters.Invalid(
                f"Constructor param name '{name}' at position {position} has a value '{value}' "
                f"whose type does not match expected ABI type '{abi_input.type}'"
            )


class ConstructorParameters:
    """Represents the constructor parameters for a set of contracts."""

    class Invalid(Exception):
        """Raised when the constructor parameters are invalid"""

    def __init__(self, parameters: OrderedDict):
        self.parameters = parameters
        for contract, contract_parameters in parameters.items():
            contract_container = get_contract_container(contract)
            _validate_constructor_abi_inputs(
                contract_name=contract,
                abi_inputs=contract_container.constructor.abi.inputs,
                resolved_parameters=_resolve_params(contract_parameters),
            )

    @classmethod
    def from_config(
        cls, config: typing.Dict, deployer_address: typing.Optional[str] = None
    ) -> "ConstructorParameters":
        print("Processing contract constructor parameters...")
        contracts_config = OrderedDict()
        contract_names = _get_contract_names(config)
        constants = config.get("constants")
        for contract_info in config["contracts"]:
            if isinstance(contract_info, str):
                contracts_config[contract_info] = OrderedDict()
                continue

            if len(contract_info) != 1:
                raise ValueError("Malformed constructor parameters YAML.")

            contract_name, contract_data = list(contract_info.items())[0]
            raw_values = (contract_data or dict()).get(CONTRACT_CONSTRUCTOR_PARAMETER_KEY, {})
            context = VariableContext(
                contract_names=contract_names,
                contract_name=contract_name,
                constants=constants,
                deployer_address=deployer_address,
            )
            contracts_config[contract_name] = OrderedDict(
                (name, _process_raw_value(value, context)) for name, value in raw_values.items()
            )

        return cls(parameters=contracts_config)

    def resolve(self, contract_name: str) -> OrderedDict:
        """Resolves the constructor parameters for a single contract."""
        return _resolve_params(self.parameters[contract_name])


def _pretty_arg(value: Any) -> str:
    if isinstance(value, (list, tuple)) and len(value) > MAX_PRINTED_ITEMS:
        shown = ", ".join(str(v) for v in value[:MAX_PRINTED_ITEMS])
        return f"[{shown}, ... ({len(value)} items)]"
    return str(value)


def _describe_call(method: ContractTransactionHandler, named_args: typing.Dict[str, Any]) -> str:
    target = f"{method.contract.contract_type.name}[{method.contract.address[:10]}].{method}"
    if not named_args:
        return f"\nTransacting {target} with no arguments"
    pretty_args = "\n\t".join(f"{name}={_pretty_arg(value)}" for name, value in named_args.items())
    return f"\nTransacting {target} with arguments:\n\t{pretty_args}"


class Transactor:
    """
    Signs contract calls with one account, printing each call and asking
    for confirmation unless autosign is on.
    """

    def __init__(self, account: AccountAPI, autosign: bool = False):
        self._account = account
        self._autosign = autosign
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        if hasattr(account, "set_autosign"):
            # impersonated accounts on a fork have nothing to sign with
            account.set_autosign(autosign)

    def get_account(self) -> AccountAPI:
        return self._account

    def transact(self, method: ContractTransactionHandler, *args, **kwargs) -> ReceiptAPI:
        named_args = _validate_method_args(method_abis=method.abis, args=args)
        print(_describe_call(method, named_args))
        if not self._autosign:
            _continue()

        receipt = method(*args, sender=self._account, **kwargs)
        txn_hash = getattr(receipt, "txn_hash", None)
        if txn_hash:
            print(f"(i) {method} confirmed in block {receipt.block_number}: {txn_hash}")
        return receipt


class Deployer(Transactor):
    """
    A Transactor that deploys the contracts listed in a constructor parameters
    file and records them in the file's registry.
    """

    def __init__(
        self,
        config: typing.Dict,
        path: Path,
        verify: bool,
        account: AccountAPI,
        autosign: bool = False,
    ):
        super().__init__(account, autosign)
        check_plugins()

        self.path = path
        self.config = config
        self.verify = verify
        self.registry_filepath = validate_config(config=config)
        self.constructor_parameters = ConstructorParameters.from_config(
            config, deployer_address=account.address
        )
        self.deployments: List[ContractInstance] = list()

        self._print_deployment_info()
        if not self._autosign:
            _continue()

    @classmethod
    def from_yaml(cls, filepath: Path, *args, **kwargs) -> "Deployer":
        config = _load_yaml(filepath)
        return cls(config=config, path=filepath, *args, **kwargs)

    def deploy(self, container: ContractContainer) -> ContractInstance:
        contract_name = container.contract_type.name
        resolved_params = self.constructor_parameters.resolve(contract_name)
        if not self._autosign:
            _confirm_resolution(resolved_params, contract_name)

        instance = self._account.deploy(container, *resolved_params.values(), publish=self.verify)
        print(f"(i) {contract_name} deployed to {instance.address}")
        self.deployments.append(instance)
        return instance

    def finalize(self, deployments: typing.Optional[List[ContractInstance]] = None) -> None:
        """
        Writes the deployments (by default, everything deployed so far) to the
        registry and, when verifying, publishes their sources.
        """
        deployments = self.deployments if deployments is None else deployments
        registry_from_ape_deployments(
            deployments=deployments,
            output_filepath=self.registry_filepath,
        )
        if self.verify:
            verify_contracts(contracts=deployments)

    def _print_deployment_info(self):
        network = networks.provider.network
        contract_names = ", ".join(self.constructor_parameters.parameters)
        print(
            f"Deploying {contract_names}",
            f"\tAccount: {self._account.address}",
            f"\tParams: {self.path}",
            f"\tRegistry: {self.registry_filepath}",
            f"\tNetwork: {network.ecosystem.name}:{network.name} (chain {network.chain_id})",
            f"\tVerify: {self.verify}",
            sep="\n",
        )
