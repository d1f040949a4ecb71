"""
Reading and writing contract artifacts.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Union

from pydantic import ValidationError

from petstore.contracts.errors import ContractFileError
from petstore.contracts.models import Contract

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_contract(path: PathLike) -> Contract:
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ContractFileError(f"Cannot read contract file {path}: {e}", path=str(path)) from e

    try:
        document = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ContractFileError(f"Contract file {path} is not valid JSON: {e}", path=str(path)) from e

    try:
        return Contract.model_validate(document)
    except ValidationError as e:
        raise ContractFileError(f"Contract file {path} has an invalid layout: {e}", path=str(path)) from e


def write_contract(contract: Contract, pact_dir: PathLike, overwrite: bool = False) -> Path:
    """
    Write `<consumer>-<provider>.json` under pact_dir.

    Unless overwrite is set, interactions already in the file are kept and
    those with the same description are replaced by the new ones.
    """
    pact_dir = Path(pact_dir)
    pact_dir.mkdir(parents=True, exist_ok=True)
    target = pact_dir / contract.file_name

    if target.exists() and not overwrite:
        existing = load_contract(target)
        incoming = {i.description for i in contract.interactions}
        kept = [i for i in existing.interactions if i.description not in incoming]
        contract = contract.model_copy(update={"interactions": kept + list(contract.interactions)})

    target.write_text(json.dumps(contract.to_document(), indent=2) + "\n", encoding="utf-8")
    logger.info("Wrote %d interaction(s) to %s", len(contract.interactions), target)
    return target


def find_contracts(pact_dir: PathLike, provider: str) -> List[Contract]:
    """Load every contract in pact_dir whose provider is `provider`."""
    pact_dir = Path(pact_dir)
    if not pact_dir.is_dir():
        raise ContractFileError(f"Contract directory not found: {pact_dir}", path=str(pact_dir))
    contracts = [load_contract(p) for p in sorted(pact_dir.glob("*.json"))]
    return [c for c in contracts if c.provider.name == provider]
