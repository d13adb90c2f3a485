"""
Shared schema types.

Amounts are Decimal end to end; in JSON responses they are written as plain
numbers rather than pydantic's default decimal strings.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import PlainSerializer

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
