import pytest

from tetradec.mle import parse_tl_sdu
from tetradec.pdu_names import CmcePduTypeD, MlePdisc, MmPduTypeD, SndcpPduType


def _bits(value, width):
    return [(value >> (width - 1 - i)) & 1 for i in range(width)]


def test_cmce_pdu():
    sdu = parse_tl_sdu(_bits(MlePdisc.CMCE, 3) + _bits(CmcePduTypeD.SETUP, 5) + [0] * 10)
    assert sdu.pdisc == MlePdisc.CMCE
    assert sdu.pdisc_name == "CMCE"
    assert sdu.pdu_type == CmcePduTypeD.SETUP
    assert sdu.pdu_name == "D-SETUP"
    assert sdu.nsapi is None


def test_mm_pdu():
    sdu = parse_tl_sdu(_bits(MlePdisc.MM, 3) + _bits(MmPduTypeD.AUTH, 4))
    assert sdu.pdu_name == "D-AUTHENTICATION"


def test_mle_pdu():
    sdu = parse_tl_sdu(_bits(MlePdisc.MLE, 3) + _bits(2, 3))
    assert sdu.pdisc_name == "MLE"
    assert sdu.pdu_name == "D-NWRK BROADCAST"


def test_sndcp_fields():
    bits = (
        _bits(MlePdisc.SNDCP, 3)
        + _bits(SndcpPduType.UNITDATA, 4)
        + _bits(3, 4)
        + _bits(1, 4)
        + _bits(2, 4)
        + _bits(4, 4)
        + _bits(5, 4)
        + [0] * 64
        + _bits(17, 8)
    )
    sdu = parse_tl_sdu(bits)
    assert sdu.pdu_name == "SN-UNITDATA"
    assert (sdu.nsapi, sdu.pcomp, sdu.dcomp) == (3, 1, 2)
    assert sdu.ip_version == 4
    assert sdu.ihl == 4 * 5
    assert sdu.protocol == 17
    assert sdu.bits == tuple(bits)


def test_sndcp_short_leaves_protocol_unset():
    bits = _bits(MlePdisc.SNDCP, 3) + _bits(SndcpPduType.DATA, 4) + _bits(6, 4)
    sdu = parse_tl_sdu(bits)
    assert sdu.pdu_name == "SN-DATA"
    assert sdu.nsapi == 6
    assert sdu.protocol is None
    assert sdu.ihl is None


@pytest.mark.parametrize("pdisc", [0, 3, MlePdisc.MGMT, MlePdisc.TEST])
def test_other_discriminators_have_no_type(pdisc):
    sdu = parse_tl_sdu(_bits(pdisc, 3) + [1] * 8)
    assert sdu.pdisc == pdisc
    assert sdu.pdu_type is None
    assert sdu.pdu_name is None


def test_too_short_raises():
    with pytest.raises(ValueError):
        parse_tl_sdu([1, 0])