import pytest

from tetradec.mac_pdu import (
    ACC_ASS_PRES_ACCESS1,
    ACC_ASS_PRES_ACCESS2,
    ACC_ASS_PRES_DL_USAGE,
    ACC_ASS_PRES_UL_USAGE,
    BS_SERVDET_AIR_ENCR,
    MACPDU_LEN_2ND_STOLEN,
    MACPDU_LEN_START_FRAG,
    Address,
    AddressType,
    addr_dump,
    addr_type_name,
    alloc_type_name,
    bs_serv_det_name,
    decode_access_assign,
    decode_chan_alloc,
    decode_length,
    decode_nr_slots,
    decode_resource,
    decode_sysinfo,
    dl_usage_name,
    macpdu_name,
    ul_dl_name,
    ul_usage_name,
)


def enc(value, width):
    return [(value >> (width - 1 - i)) & 1 for i in range(width)]


def build(*fields):
    out = []
    for value, width in fields:
        out.extend(enc(value, width))
    return out


def make_sysinfo(option_field, optional, cck_valid=0):
    bits = build(
        (2, 2), (0, 2),
        (3600, 12), (4, 4), (1, 2), (3, 3), (1, 1),
        (2, 2), (5, 3), (9, 4), (6, 4), (11, 4),
        (cck_valid, 1), (option_field, 2), (optional, 20),
    )
    bits += [0] * (82 - len(bits))
    bits += build((1234, 14), (0xBEEF, 16), (BS_SERVDET_AIR_ENCR, 12))
    return bits


def test_sysinfo_fields():
    sid = decode_sysinfo(make_sysinfo(2, 0x12345))
    assert (sid.main_carrier, sid.freq_band, sid.freq_offset) == (3600, 4, 1)
    assert (sid.duplex_spacing, sid.reverse_operation) == (3, 1)
    assert (sid.num_of_csch, sid.ms_txpwr_max_cell) == (2, 5)
    assert (sid.rxlev_access_min, sid.access_parameter, sid.radio_dl_timeout) == (9, 6, 11)
    assert sid.option_field == 2
    assert sid.access_code == 0x12345
    assert sid.mle_si.la == 1234
    assert sid.mle_si.subscr_class == 0xBEEF
    assert sid.mle_si.bs_service_details == BS_SERVDET_AIR_ENCR


def test_sysinfo_shared_fields_agree():
    sid = decode_sysinfo(make_sysinfo(0, 0xABCDE, cck_valid=1))
    assert sid.cck_valid_no_hf == 1
    assert sid.cck_id == sid.hyperframe_number
    assert sid.frame_bitmap == sid.access_code == sid.ext_service == 0xABCDE


def test_sysinfo_too_short():
    with pytest.raises(ValueError):
        decode_sysinfo([0] * 60)


def test_decode_length_values():
    assert decode_length(0x3E) == MACPDU_LEN_2ND_STOLEN
    assert decode_length(0x3F) == MACPDU_LEN_START_FRAG
    assert decode_length(0x12) == 0x12
    assert decode_length(5) == 5


@pytest.mark.parametrize("ind", [0, 0x3B, 0x3C, 0x3D])
def test_decode_length_reserved(ind):
    with pytest.raises(ValueError):
        decode_length(ind)


def test_decode_nr_slots():
    assert decode_nr_slots(0x7) == 8
    assert decode_nr_slots(0xF) == 0xFF
    assert decode_nr_slots(0x13) == decode_nr_slots(0x3)


def test_chan_alloc_simple():
    bits = build((1, 2), (3, 4), (1, 2), (1, 1), (0, 1), (1000, 12), (0, 1), (1, 2))
    cad = decode_chan_alloc(bits + [1, 1, 1])
    assert cad.bit_length == len(bits)
    assert (cad.type, cad.timeslot, cad.ul_dl, cad.carrier_nr) == (1, 3, 1, 1000)
    assert cad.monit_pattern == 1


def test_chan_alloc_ext_carrier_and_f18():
    bits = build(
        (0, 2), (1, 4), (2, 2), (0, 1), (1, 1), (77, 12),
        (1, 1), (4, 4), (2, 2), (5, 3), (1, 1), (0, 2), (3, 2),
    )
    cad = decode_chan_alloc(bits)
    assert cad.bit_length == len(bits)
    assert (cad.ext_freq_band, cad.ext_freq_offset, cad.ext_duplex_spc, cad.ext_reverse_oper) == (4, 2, 5, 1)
    assert cad.monit_patt_f18 == 3


def test_chan_alloc_augmented():
    bits = build(
        (0, 2), (1, 4), (0, 2), (0, 1), (0, 1), (10, 12), (0, 1), (1, 2),
        (2, 2), (3, 3), (1, 3), (4, 3), (0, 3), (6, 3), (9, 4), (17, 5), (1, 2),
        (0, 11), (0, 4), (1, 1), (0, 16), (0, 1), (0, 1),
    )
    cad = decode_chan_alloc(bits)
    assert cad.bit_length == len(bits)
    assert cad.aug_conf_chan_stat == 6
    assert cad.aug_bs_tx_rel == 17
    assert cad.aug_napping_sts == 1


def test_resource_ssi_with_slot_grant():
    header = build(
        (0, 2), (1, 1), (0, 1), (0, 2), (0, 1), (10, 6),
        (AddressType.SSI, 3), (123456, 24),
        (0, 1), (1, 1), (7, 4), (3, 4), (0, 1),
    )
    rsd = decode_resource(header + [0] * 40, 0)
    assert rsd.tm_sdu_offset == len(header)
    assert rsd.addr.ssi == 123456
    assert rsd.macpdu_length == 10
    assert rsd.fill_bits == 1
    assert rsd.slot_granting_nr_slots == decode_nr_slots(7)
    assert rsd.slot_granting_delay == 3
    assert rsd.is_encrypted is False


def test_resource_null_address():
    bits = build((0, 2), (0, 1), (0, 1), (0, 2), (0, 1), (0x3F, 6), (0, 3)) + [0] * 40
    rsd = decode_resource(bits, 0)
    assert rsd.addr.type == AddressType.NULL
    assert rsd.tm_sdu_offset == 0
    assert rsd.macpdu_length == MACPDU_LEN_START_FRAG


def test_resource_chan_alloc_parsed_or_skipped():
    head = build(
        (0, 2), (0, 1), (0, 1), (1, 2), (0, 1), (0x3E, 6),
        (AddressType.SSI_USAGE, 3), (42, 24), (5, 6),
        (0, 1), (0, 1), (1, 1),
    )
    alloc = build((1, 2), (3, 4), (1, 2), (1, 1), (0, 1), (1000, 12), (0, 1), (1, 2))
    bits = head + alloc + [0] * 20

    encrypted = decode_resource(bits, 0)
    assert encrypted.is_encrypted is True
    assert encrypted.cad is None
    assert encrypted.tm_sdu_offset == len(head)
    assert encrypted.addr.usage_marker == 5

    decrypted = decode_resource(bits, 1)
    assert decrypted.is_encrypted is False
    assert decrypted.cad.carrier_nr == 1000
    assert decrypted.tm_sdu_offset == len(head) + len(alloc)


def test_resource_reserved_length_is_none():
    bits = build((0, 2), (0, 1), (0, 1), (0, 2), (0, 1), (0, 6), (0, 3)) + [0] * 20
    assert decode_resource(bits, 0).macpdu_length is None


def test_access_assign_both_fields():
    aad = decode_access_assign(build((0, 2), (0x25, 6), (0x13, 6)), 0)
    assert aad.pres == ACC_ASS_PRES_ACCESS1 | ACC_ASS_PRES_ACCESS2
    assert (aad.access[0].access_code, aad.access[0].base_frame_len) == (2, 5)
    assert (aad.access[1].access_code, aad.access[1].base_frame_len) == (1, 3)


def test_access_assign_usage_markers():
    aad = decode_access_assign(build((3, 2), (9, 6), (12, 6)), 0)
    assert aad.pres == ACC_ASS_PRES_DL_USAGE | ACC_ASS_PRES_UL_USAGE
    assert (aad.dl_usage, aad.ul_usage) == (9, 12)


def test_access_assign_frame18_only_access2():
    aad = decode_access_assign(build((3, 2), (9, 6), (0x21, 6)), 1)
    assert aad.pres == ACC_ASS_PRES_ACCESS2
    assert aad.access[1].access_code == 2
    assert aad.dl_usage == 0


def test_names():
    assert macpdu_name(2) == "BROADCAST"
    assert macpdu_name(7) == "unknown 0x7"
    assert bs_serv_det_name(BS_SERVDET_AIR_ENCR) == "Air encryption"
    assert dl_usage_name(2) == "Common control"
    assert dl_usage_name(17) == "Traffic"
    assert ul_usage_name(0) == "Unallocated"
    assert ul_usage_name(4) == "Traffic"
    assert addr_type_name(AddressType.SSI_USAGE) == "SSI + Usage Marker"
    assert alloc_type_name(2) == "Quit and go"
    assert ul_dl_name(3) == "Uplink + Downlink"


def test_addr_dump():
    assert addr_dump(Address(type=AddressType.SSI, ssi=1234)) == "SSI(1234)"
    assert addr_dump(Address(type=AddressType.SSI_EVENT, ssi=7, event_label=3)) == "SSI + Event Label(7/E3)"
    assert addr_dump(Address(type=AddressType.SSI_USAGE, ssi=7, usage_marker=9)) == "SSI + Usage Marker(7/U9)"
    assert addr_dump(Address()) == "Null PDU()"