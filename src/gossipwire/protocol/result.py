# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

# Explicit success/failure values for operations that report errors to their
# caller instead of raising them. Callers can either match on the result:
#
#   match codec.decode(data):
#       case Ok(envelope):
#           ...
#       case Err(error):
#           ...
#
# or use unwrap() to get the value and have the error raised if there is one.

from dataclasses import dataclass
from typing import Never

__all__ = 'Ok', 'Err', 'Result'


@dataclass(frozen=True)
class Ok[T]:
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self) -> Never:
        raise ValueError(f'Called unwrap_err() on an Ok result: {self.value!r}')

    def unwrap_or[D](self, default: D) -> T | D:  # noqa: ARG002
        return self.value


@dataclass(frozen=True)
class Err[E: Exception]:
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Never:
        raise self.error

    def unwrap_err(self) -> E:
        return self.error

    def unwrap_or[D](self, default: D) -> D:
        return default


type Result[T, E: Exception] = Ok[T] | Err[E]
