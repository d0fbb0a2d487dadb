"""PDU type enumerations and names for the CMCE, MLE, MM and SNDCP layers."""

from __future__ import annotations

from enum import IntEnum
from typing import Mapping


def _lookup(table: Mapping[int, str], value: int) -> str:
    try:
        return table[value]
    except KeyError:
        return f"unknown 0x{value:x}"


class CmcePduTypeD(IntEnum):
    """Downlink CMCE PDU types (14.8.28)."""

    ALERT = 0x00
    CALL_PROCEEDING = 0x01
    CONNECT = 0x02
    CONNECT_ACK = 0x03
    DISCONNECT = 0x04
    INFO = 0x05
    RELEASE = 0x06
    SETUP = 0x07
    STATUS = 0x08
    TX_CEASED = 0x09
    TX_CONTINUE = 0x0A
    TX_GRANTED = 0x0B
    TX_WAIT = 0x0C
    TX_INTERRUPT = 0x0D
    CALL_RESTORE = 0x0E
    SDS_DATA = 0x0F
    FACILITY = 0x10


class CmcePduTypeU(IntEnum):
    """Uplink CMCE PDU types."""

    ALERT = 0x00
    CONNECT = 0x02
    DISCONNECT = 0x04
    INFO = 0x05
    RELEASE = 0x06
    SETUP = 0x07
    STATUS = 0x08
    TX_CEASED = 0x09
    TX_DEMAND = 0x0A
    CALL_RESTORE = 0x0E
    SDS_DATA = 0x0F
    FACILITY = 0x10


class MlePduTypeD(IntEnum):
    """Downlink MLE PDU types (18.5.20)."""

    NEW_CELL = 0
    PREPARE_FAIL = 1
    NWRK_BROADCAST = 2
    NWRK_BROADCAST_EXT = 3
    RESTORE_ACK = 4
    RESTORE_FAIL = 5
    CHANNEL_RESPONSE = 6


class MlePdisc(IntEnum):
    """MLE protocol discriminators (18.5.21)."""

    MM = 1
    CMCE = 2
    SNDCP = 4
    MLE = 5
    MGMT = 6
    TEST = 7


class MmPduTypeD(IntEnum):
    """Downlink MM PDU types (16.10.39)."""

    OTAR = 0x0
    AUTH = 0x1
    CK_CHG_DEM = 0x2
    DISABLE = 0x3
    ENABLE = 0x4
    LOC_UPD_ACC = 0x5
    LOC_UPD_CMD = 0x6
    LOC_UPD_REJ = 0x7
    LOC_UPD_PROC = 0x9
    ATT_DET_GRP = 0xA
    ATT_DET_GRP_ACK = 0xB
    MM_STATUS = 0xC
    MM_PDU_NOTSUPP = 0xF


class SndcpPduType(IntEnum):
    """SNDCP PDU types (28.115)."""

    ACT_PDP_ACCEPT = 0x0
    DEACT_PDP_ACC = 0x1
    DEACT_PDP_DEMAND = 0x2
    ACT_PDP_REJECT = 0x3
    UNITDATA = 0x4
    DATA = 0x5
    DATA_TX_REQ = 0x6
    DATA_TX_RESP = 0x7
    END_OF_DATA = 0x8
    RECONNECT = 0x9
    PAGE_REQUEST = 0xA
    NOT_SUPPORTED = 0xB
    DATA_PRIORITY = 0xC
    MODIFY = 0xD
    ACT_PDP_DEMAND = 0x0
    PAGE_RESPONSE = 0xA


_CMCE_D_NAMES = {
    CmcePduTypeD.ALERT: "D-ALERT",
    CmcePduTypeD.CALL_PROCEEDING: "D-CALL PROCEEDING",
    CmcePduTypeD.CONNECT: "D-CONNECT",
    CmcePduTypeD.CONNECT_ACK: "D-CONNECT ACK",
    CmcePduTypeD.DISCONNECT: "D-DISCONNECT",
    CmcePduTypeD.INFO: "D-INFO",
    CmcePduTypeD.RELEASE: "D-RELEASE",
    CmcePduTypeD.SETUP: "D-SETUP",
    CmcePduTypeD.STATUS: "D-STATUS",
    CmcePduTypeD.TX_CEASED: "D-TX CEASED",
    CmcePduTypeD.TX_CONTINUE: "D-TX CONTINUE",
    CmcePduTypeD.TX_GRANTED: "D-TX GRANTED",
    CmcePduTypeD.TX_WAIT: "D-TX WAIT",
    CmcePduTypeD.TX_INTERRUPT: "D-TX INTERRUPT",
    CmcePduTypeD.CALL_RESTORE: "D-TX CALL RESTORE",
    CmcePduTypeD.SDS_DATA: "D-SDS DATA",
    CmcePduTypeD.FACILITY: "D-FACILITY",
}

_CMCE_U_NAMES = {
    CmcePduTypeU.ALERT: "U-ALERT",
    CmcePduTypeU.CONNECT: "U-CONNECT",
    CmcePduTypeU.DISCONNECT: "U-DISCONNECT",
    CmcePduTypeU.INFO: "U-INFO",
    CmcePduTypeU.RELEASE: "U-RELEASE",
    CmcePduTypeU.SETUP: "U-SETUP",
    CmcePduTypeU.STATUS: "U-STATUS",
    CmcePduTypeU.TX_CEASED: "U-TX CEASED",
    CmcePduTypeU.TX_DEMAND: "U-TX DEMAND",
    CmcePduTypeU.CALL_RESTORE: "U-TX CALL RESTORE",
    CmcePduTypeU.SDS_DATA: "U-SDS DATA",
    CmcePduTypeU.FACILITY: "U-FACILITY",
}

_MLE_PDISC_NAMES = {
    MlePdisc.MM: "MM",
    MlePdisc.CMCE: "CMCE",
    MlePdisc.SNDCP: "SNDCP",
    MlePdisc.MLE: "MLE",
    MlePdisc.MGMT: "MGMT",
    MlePdisc.TEST: "TEST",
}

_MLE_D_NAMES = {
    MlePduTypeD.NEW_CELL: "D-NEW CELL",
    MlePduTypeD.PREPARE_FAIL: "D-PREPARE FAIL",
    MlePduTypeD.NWRK_BROADCAST: "D-NWRK BROADCAST",
    MlePduTypeD.NWRK_BROADCAST_EXT: "D-NWRK BROADCAST EXT",
    MlePduTypeD.RESTORE_ACK: "D-RESTORE ACK",
    MlePduTypeD.RESTORE_FAIL: "D-RESTORE FAIL",
    MlePduTypeD.CHANNEL_RESPONSE: "D-CHANNEL RESPONSE",
}

_MM_D_NAMES = {
    MmPduTypeD.OTAR: "D-OTAR",
    MmPduTypeD.AUTH: "D-AUTHENTICATION",
    MmPduTypeD.CK_CHG_DEM: "D-CK CHANGE DEMAND",
    MmPduTypeD.DISABLE: "D-DISABLE",
    MmPduTypeD.ENABLE: "D-ENABLE",
    MmPduTypeD.LOC_UPD_ACC: "D-LOCATION UPDATE ACCEPT",
    MmPduTypeD.LOC_UPD_CMD: "D-LOCATION UPDATE COMMAND",
    MmPduTypeD.LOC_UPD_REJ: "D-LOCATION UPDATE REJECT",
    MmPduTypeD.LOC_UPD_PROC: "D-LOCATION UPDATE PROCEEDING",
    MmPduTypeD.ATT_DET_GRP: "D-ATTACH/DETACH GROUP ID",
    MmPduTypeD.ATT_DET_GRP_ACK: "D-ATTACH/DETACH GROUP ID ACK",
    MmPduTypeD.MM_STATUS: "D-MM STATUS",
    MmPduTypeD.MM_PDU_NOTSUPP: "MM PDU/FUNCTION NOT SUPPORTED",
}

_SNDCP_NAMES = {
    SndcpPduType.ACT_PDP_ACCEPT: "SN-ACTIVATE PDP ACCEPT",
    SndcpPduType.DEACT_PDP_ACC: "SN-DEACTIVATE PDP ACCEPT",
    SndcpPduType.DEACT_PDP_DEMAND: "SN-DEACTIVATE PDP DEMAND",
    SndcpPduType.ACT_PDP_REJECT: "SN-ACTIVATE PDP REJECT",
    SndcpPduType.UNITDATA: "SN-UNITDATA",
    SndcpPduType.DATA: "SN-DATA",
    SndcpPduType.DATA_TX_REQ: "SN-DATA TX REQUEST",
    SndcpPduType.DATA_TX_RESP: "SN-DATA TX RESPONSE",
    SndcpPduType.END_OF_DATA: "SN-END OF DATA",
    SndcpPduType.RECONNECT: "SN-RECONNECT",
    SndcpPduType.PAGE_REQUEST: "SN-PAGE REQUEST",
    SndcpPduType.NOT_SUPPORTED: "SN-NOT SUPPORTED",
    SndcpPduType.DATA_PRIORITY: "SN-DATA PRIORITY",
    SndcpPduType.MODIFY: "SN-MODIFY",
}


def cmce_pdut_name(pdut: int, uplink: int = 0) -> str:
    """Name of a CMCE PDU type, downlink or uplink."""
    table = _CMCE_U_NAMES if uplink else _CMCE_D_NAMES
    return _lookup(table, pdut & 0xFFFF)


def mle_pdisc_name(pdisc: int) -> str:
    """Name of an MLE protocol discriminator."""
    return _lookup(_MLE_PDISC_NAMES, pdisc & 0xFF)


def mle_pdut_name(pdut: int, uplink: int = 0) -> str:
    """Name of an MLE PDU type; only downlink names are known."""
    return _lookup(_MLE_D_NAMES, pdut)


def mm_pdut_name(pdut: int, uplink: int = 0) -> str:
    """Name of an MM PDU type; only downlink names are known."""
    return _lookup(_MM_D_NAMES, pdut & 0xFF)


def sndcp_pdut_name(pdut: int, uplink: int = 0) -> str:
    """Name of an SNDCP PDU type."""
    return _lookup(_SNDCP_NAMES, pdut & 0xFF)