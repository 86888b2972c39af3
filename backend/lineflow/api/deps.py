"""API dependency providers."""

from typing import Annotated

from fastapi import Depends

from lineflow.services.topology import TopologyValidator


def get_validator() -> TopologyValidator:
    """Provide a topology validator instance."""
    return TopologyValidator()


Validator = Annotated[TopologyValidator, Depends(get_validator)]
