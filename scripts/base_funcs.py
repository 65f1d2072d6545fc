import logging
import string
from pathlib import Path
from typing import Any, List

from errors import ArtifactNotFound

logger = logging.getLogger(__name__)

ADDRESS_HEX_WIDTH = 64
SHORT_STRING_MAX_LEN = 31
SIERRA_SUFFIX = ".contract_class.json"
CASM_SUFFIX = ".compiled_contract_class.json"
# Scarb packages searched for compiled artifacts, in order
ARTIFACT_PACKAGES = ("contracts", "mocks")


def str_to_felt(text):
    b_text = bytes(text, 'UTF-8')
    return int.from_bytes(b_text, "big")

def felt_to_string(number):
    return number.to_bytes(length=(8 + (number + (number < 0)).bit_length()) // 8, byteorder='big', signed=True).decode('UTF-8').lstrip('\x00')


def normalize_address(address) -> str:
    """
    Left-pad an address to the canonical 0x + 64 hex digits form.

    Nodes return some addresses without leading zeros, so every address is
    normalized before it is stored or substituted.

    Args:
        address: Address as an int or a hex string (with or without 0x)

    Returns:
        Canonical address string, e.g. 0x0000...01
    """
    if isinstance(address, int):
        if address < 0:
            raise ValueError(f"Invalid address: {address}")
        digits = format(address, "x")
    else:
        digits = address[2:] if address[:2].lower() == "0x" else address
        if not is_hex_digits(digits):
            raise ValueError(f"Invalid address: {address!r}")
    if len(digits) > ADDRESS_HEX_WIDTH:
        raise ValueError(f"Address {address!r} is wider than {ADDRESS_HEX_WIDTH} hex digits")
    return "0x" + digits.rjust(ADDRESS_HEX_WIDTH, "0")


def is_hex_digits(digits: str) -> bool:
    return bool(digits) and all(c in string.hexdigits for c in digits)


def is_decimal_string(value: str) -> bool:
    return value.isascii() and value.isdecimal()


def is_numeric_string(value: str) -> bool:
    if value[:2].lower() == "0x":
        return is_hex_digits(value[2:])
    return is_decimal_string(value)


def byte_array_from_string(text: str) -> List[int]:
    """Encode text longer than a short string as a Cairo ByteArray."""
    data = bytes(text, 'UTF-8')
    full_words = [
        int.from_bytes(data[i:i + SHORT_STRING_MAX_LEN], "big")
        for i in range(0, len(data) - len(data) % SHORT_STRING_MAX_LEN, SHORT_STRING_MAX_LEN)
    ]
    pending = data[len(full_words) * SHORT_STRING_MAX_LEN:]
    return [len(full_words), *full_words, int.from_bytes(pending, "big"), len(pending)]


def compile_value(value: Any) -> List[int]:
    if isinstance(value, bool):
        return [int(value)]
    if isinstance(value, int):
        return [value]
    if isinstance(value, str):
        if is_numeric_string(value):
            return [int(value, 16) if value[:2].lower() == "0x" else int(value)]
        if len(value.encode('UTF-8')) <= SHORT_STRING_MAX_LEN:
            return [str_to_felt(value)]
        return byte_array_from_string(value)
    if isinstance(value, (list, tuple)):
        calldata = [len(value)]
        for item in value:
            calldata.extend(compile_value(item))
        return calldata
    if isinstance(value, dict):
        # structs are laid out member by member
        return compile_calldata(value)
    raise TypeError(f"Cannot compile {type(value).__name__} value {value!r} to calldata")


def compile_calldata(args) -> List[int]:
    """
    Flatten constructor or call arguments into a list of felts.

    Arguments are compiled positionally, in the order they are given:
    numeric strings become felts, other strings are encoded as short strings
    (or ByteArrays when longer than 31 bytes) and lists are length-prefixed.

    Args:
        args: Mapping of parameter name to value, or a sequence of values

    Returns:
        Raw calldata
    """
    values = args.values() if isinstance(args, dict) else args
    calldata = []
    for value in values:
        calldata.extend(compile_value(value))
    return calldata


def find_contract_file(build_dir, name: str, suffix: str) -> Path:
    build_dir = Path(build_dir)
    candidates = [build_dir / f"{package}_{name}{suffix}" for package in ARTIFACT_PACKAGES]
    for index, path in enumerate(candidates):
        if path.exists():
            if index > 0:
                logger.info(f"ℹ️  Using {ARTIFACT_PACKAGES[index]} contract for {name} from {path}")
            return path
    raise ArtifactNotFound(
        f"Contract file not found for {name} with suffix {suffix} in any of {', '.join(ARTIFACT_PACKAGES)} under {build_dir}"
    )


def read_artifact(build_dir, name: str, suffix: str) -> str:
    return find_contract_file(build_dir, name, suffix).read_text()
