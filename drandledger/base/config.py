# The MIT License (MIT)
# Copyright © 2023 Yuma Rao
# Copyright © 2023 Opentensor Foundation

# Permission is hereby granted, free of charge, to any person obtaining a copy of this software and associated
# documentation files (the “Software”), to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so, subject to the following conditions:

# The above copyright notice and this permission notice shall be included in all copies or substantial portions of
# the Software.

# THE SOFTWARE IS PROVIDED “AS IS”, WITHOUT WARRANTY OF ANY KIND, EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO
# THE WARRANTIES OF MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL
# THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN ACTION
# OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER
# DEALINGS IN THE SOFTWARE.

"""Ledger configuration.

The configuration is owned by whoever deploys the ledger and is read-only
to it. Values come from command line flags; environment variables
(``DRANDLEDGER_<FIELD>``) have the highest priority.
"""

from __future__ import annotations

import argparse
import os
from typing import Mapping

import bittensor as bt
from pydantic import BaseModel, ConfigDict, Field


ENV_PREFIX = "DRANDLEDGER_"
DEFAULT_DATABASE_URL = "sqlite://"
CLI_DATABASE_URL = "sqlite:///drand_ledger.db"


class ChainConfig(BaseModel):
    """drand chain constants consumed by the round clock."""

    model_config = ConfigDict(frozen=True)

    genesis_seconds: int = Field(default=1677685200, ge=0)
    round_length_seconds: int = Field(default=3, gt=0)


class LedgerConfig(BaseModel):
    """Process-wide ledger configuration.

    Only ``min_round`` and ``chain`` are consumed by the ledger itself; the
    incentive fields are carried for the payout logic downstream.
    """

    model_config = ConfigDict(frozen=True)

    manager: str = Field(min_length=1)
    gateway: str | None = None
    min_round: int = Field(default=1, ge=1)
    incentive_point_price: int = Field(default=0, ge=0)
    incentive_denom: str = "unois"
    chain: ChainConfig = Field(default_factory=ChainConfig)
    database_url: str = DEFAULT_DATABASE_URL


def add_args(parser: argparse.ArgumentParser) -> None:
    """
    Adds ledger configuration arguments to the parser.
    """

    parser.add_argument(
        "--ledger.manager",
        type=str,
        help="Address allowed to manage the bot allowlist.",
        default="manager",
    )
    parser.add_argument(
        "--ledger.gateway",
        type=str,
        help="Address of the gateway that receives verified rounds.",
        default=None,
    )
    parser.add_argument(
        "--ledger.min_round",
        type=int,
        help="The lowest drand round accepted for verification and storage.",
        default=1,
    )
    parser.add_argument(
        "--ledger.incentive_point_price",
        type=int,
        help="How much of the incentive denom is paid per incentive point.",
        default=0,
    )
    parser.add_argument(
        "--ledger.incentive_denom",
        type=str,
        help="Bot incentive denom.",
        default="unois",
    )
    parser.add_argument(
        "--ledger.database_url",
        type=str,
        help="SQLAlchemy URL of the ledger database.",
        default=CLI_DATABASE_URL,
    )
    parser.add_argument(
        "--chain.genesis_seconds",
        type=int,
        help="Publication time of drand round 1 (UNIX seconds).",
        default=ChainConfig().genesis_seconds,
    )
    parser.add_argument(
        "--chain.round_length_seconds",
        type=int,
        help="Seconds between two drand rounds.",
        default=ChainConfig().round_length_seconds,
    )


_LEDGER_FIELDS = ("manager", "gateway", "min_round", "incentive_point_price", "incentive_denom", "database_url")
_CHAIN_FIELDS = ("genesis_seconds", "round_length_seconds")


def config_from_args(
    args: argparse.Namespace,
    environ: Mapping[str, str] | None = None,
) -> LedgerConfig:
    """Build a LedgerConfig from parsed arguments and the environment."""
    if environ is None:
        environ = os.environ

    ledger = {name: getattr(args, f"ledger.{name}", None) for name in _LEDGER_FIELDS}
    chain = {name: getattr(args, f"chain.{name}", None) for name in _CHAIN_FIELDS}

    # Environment variables have HIGHEST priority (override flags)
    for name in _LEDGER_FIELDS:
        value = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value:
            ledger[name] = value
    for name in _CHAIN_FIELDS:
        value = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value:
            chain[name] = value

    ledger = {k: v for k, v in ledger.items() if v is not None}
    chain = {k: v for k, v in chain.items() if v is not None}
    config = LedgerConfig(chain=ChainConfig(**chain), **ledger)
    bt.logging.debug({"ledger_config": config.model_dump(mode="json", exclude={"database_url"})})
    return config


__all__ = ["ChainConfig", "LedgerConfig", "add_args", "config_from_args"]
