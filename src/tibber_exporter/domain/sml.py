from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class SmlModel(BaseModel):
    model_config = ConfigDict(frozen=True)


# Values


class IntegerValue(SmlModel):
    kind: Literal["integer"] = "integer"
    signed: bool
    bits: int  # 8, 16, 32 or 64
    value: int


class BoolValue(SmlModel):
    kind: Literal["bool"] = "bool"
    value: bool


class BytesValue(SmlModel):
    kind: Literal["bytes"] = "bytes"
    value: bytes


class ListValue(SmlModel):
    kind: Literal["list"] = "list"
    value: list["SmlValue"] = Field(default_factory=list)


SmlValue = Annotated[
    Union[IntegerValue, BoolValue, BytesValue, ListValue],
    Field(discriminator="kind"),
]

ListValue.model_rebuild()


class SmlTime(SmlModel):
    kind: Literal["sec_index", "timestamp", "local_timestamp"]
    value: int
    # Only set for local timestamps (minutes)
    local_offset: Optional[int] = None
    season_offset: Optional[int] = None


class ListEntry(SmlModel):
    obj_name: bytes
    status: Optional[int] = None
    val_time: Optional[SmlTime] = None
    unit: Optional[int] = None
    scaler: Optional[int] = None
    value: SmlValue
    value_signature: Optional[bytes] = None


# Message bodies


class OpenResponse(SmlModel):
    kind: Literal["open_response"] = "open_response"
    codepage: Optional[bytes] = None
    client_id: Optional[bytes] = None
    req_file_id: bytes
    server_id: bytes
    ref_time: Optional[SmlTime] = None
    sml_version: Optional[int] = None


class CloseResponse(SmlModel):
    kind: Literal["close_response"] = "close_response"
    global_signature: Optional[bytes] = None


class GetListResponse(SmlModel):
    kind: Literal["get_list_response"] = "get_list_response"
    client_id: Optional[bytes] = None
    server_id: bytes
    list_name: Optional[bytes] = None
    act_sensor_time: Optional[SmlTime] = None
    val_list: list[ListEntry] = Field(default_factory=list)
    list_signature: Optional[bytes] = None
    act_gateway_time: Optional[SmlTime] = None


class UnknownBody(SmlModel):
    """Any message body we do not interpret, kept with its tag."""

    kind: Literal["unknown"] = "unknown"
    tag: int


MessageBody = Annotated[
    Union[OpenResponse, CloseResponse, GetListResponse, UnknownBody],
    Field(discriminator="kind"),
]


class Message(SmlModel):
    transaction_id: bytes
    group_no: int = 0
    abort_on_error: int = 0
    message_body: MessageBody
    crc: int = 0
