"""Pydantic schemas for the action runner API."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ExecuteRequest(BaseModel):
    inputs: Dict[str, Optional[str]] = Field(default_factory=dict, description="Action inputs by name")


class ExecuteResponse(BaseModel):
    action: str = Field(..., description="Name of the executed action")
    response: str = Field(..., description="success or failure")
    outputs: Dict[str, str] = Field(default_factory=dict, description="Result map of the action")


class InputMetadata(BaseModel):
    name: str
    required: bool = False
    encrypted: bool = False
    default: Optional[str] = None
    description: str = ""


class ActionMetadata(BaseModel):
    name: str
    display_name: str
    description: str
    inputs: List[InputMetadata] = Field(default_factory=list)
    outputs: List[str] = Field(default_factory=list)
    responses: List[str] = Field(default_factory=list)
