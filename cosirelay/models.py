from pydantic import BaseModel, ConfigDict, Field, StrictInt, conint
from typing import Optional
from .enums import Parity, FlowControl


class SerialConfig(BaseModel):
    """Активные параметры линии. Дефолты совпадают с прошивкой контроллера."""
    port_name:    str = Field("COM1", examples=["COM3", "/dev/ttyUSB0"])
    baud_rate:    int = Field(9600, gt=0)
    data_bits:    int = Field(8, ge=5, le=8)
    parity:       Parity = Parity.NONE
    stop_bits:    int = Field(1, ge=1, le=2)
    flow_control: FlowControl = FlowControl.NONE

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)


class SerialConfigUpdate(BaseModel):
    """
    Частичное обновление конфигурации.
    ``None`` и пустые строки означают «поле не передано».
    Диапазоны проверяет ``ConfigStore.update`` целиком, до слияния.
    """
    port_name:    Optional[str] = None
    baud_rate:    Optional[StrictInt] = None
    data_bits:    Optional[StrictInt] = None
    parity:       Optional[str] = None
    stop_bits:    Optional[StrictInt] = None
    flow_control: Optional[str] = None


class SerialResult(BaseModel):
    result:         str = "sent"
    length:         int
    serial_port:    str
    serial_written: int
    serial_reply:   Optional[str] = None      # только если что-то прочитали

    model_config = ConfigDict(frozen=True)


class ProgramRq(BaseModel):
    program: str = Field("", examples=["00 sp 50\n00 mo 1 100"])


class ReadPositionRq(BaseModel):
    slot: conint(ge=0, strict=True) = Field(0, examples=[3])  # {} → слот 0
