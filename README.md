# tetradec

`tetradec` is a pure-Python library for the upper layers of the TETRA
downlink protocol stack. It works on demodulated bits. Each bit is one item
in a sequence, with the value 0 or 1.

## What is in the package

- **Burst synchronisation** (`tetradec.burst_sync`).
  `BurstSynchronizer(on_burst, time=None)` buffers the bits passed to `feed`.
  It searches for the synchronisation training sequence and then locks onto
  the 510-bit timeslot grid.
  - In the locked state it advances its `TdmaTime` by one timeslot for each
    burst it examines.
  - It calls `on_burst(bits, train_seq)` only when a training sequence lies
    at its expected position: offset 214 for a SYNC burst, 244 for a normal
    burst.
  - If no training sequence is found, or a SYNC sequence is out of place, it
    drops back to `RxState.UNLOCKED`.
  - `feed` returns the current `RxState`. It raises `ValueError` if more
    than 4096 bits are given in one call.
- **Bursts** (`tetradec.burst`).
  - `find_train_seq` searches for the training sequences selected by a bit
    mask.
  - `build_sync_c_d_burst` and `build_norm_c_d_burst` build continuous
    downlink bursts, including the phase adjustment bits (`phase_adj_bits`,
    `sum_up_phase`).
  - `split_burst(burst, train_seq, time, state)` cuts a received burst into
    `BurstPart` blocks (`TpSapType.SB1`, `SB2`, `BBK`, `NDB` or `SCH_F`). It
    also records the frame, multiframe and timeslot content in
    `state.display`.
- **MAC PDUs** (`tetradec.mac_pdu`).
  - Decoders: `decode_sysinfo`, `decode_resource`, `decode_chan_alloc`,
    `decode_access_assign`, `decode_length` and `decode_nr_slots`.
  - Name helpers, such as `macpdu_name`, `addr_type_name` and `addr_dump`.
- **Upper MAC** (`tetradec.upper_mac`). `UpperMac(state, llc)` takes
  `TmvUnitdata` indications, which are MAC blocks that are already decoded
  and CRC-checked.
  - It handles SYSINFO broadcasts, ACCESS-ASSIGN, MAC-RESOURCE and
    supplementary PDUs.
  - It reassembles fragmented PDUs from MAC-RESOURCE, MAC-FRAG and MAC-END,
    and keeps one `FragSlot` per timeslot. `age_fragslots` runs on frame 18
    and drops fragments older than 6 multiframes.
  - It passes the resulting TM-SDUs to `llc.receive`.
  - `receive` returns the number of bits the PDU occupied. It returns `None`
    when the PDU fills the slot or its length is unknown.
- **LLC** (`tetradec.llc_pdu`, `tetradec.llc`).
  - `parse_llc_pdu` parses basic-link and advanced-link PDUs.
  - `compute_fcs` computes the 32-bit FCS. For basic-link PDUs that carry an
    FCS, the parser uses it to set `fcs_invalid`.
  - `LlcEntity(sdu_handler)` passes TL-SDUs straight to the handler. It
    reassembles AL-DATA/AL-UDATA segments by N(S), and `pending()` shows the
    segments that are still incomplete.
- **MLE** (`tetradec.mle`). `parse_tl_sdu` reads the protocol discriminator
  and the PDU type that follows it, and returns a `TlSdu` with their names.
  For SNDCP PDUs it also reads NSAPI, PCOMP, DCOMP, IP version, IHL and the
  protocol field.
- **Helpers**:
  - `tetradec.tdma.TdmaTime`, for TDMA time arithmetic.
  - `tetradec.common`: `bits_to_uint`, `dl_carrier_hz`, `ul_carrier_hz`,
    `lchan_name`, `LogicalChannel`, `MacState` and `DisplayState`.
  - `tetradec.pdu_names`: enumerations and name lookups for the CMCE, MLE,
    MM and SNDCP PDU types.

Name lookups return `"unknown 0x.."` for values they do not know.

### DisplayState

`DisplayState` is available as `MacState.display`. It gathers what a status
view of a cell would show. The package fills these fields:

- **`UpperMac`**:
  - the DL/UL frequencies
  - the hyperframe
  - the cell service flags
  - the access codes
  - the DL/UL usage markers
- **`split_burst`**:
  - the multiframe and frame numbers
  - the content of each timeslot

The package never sets `mcc`, `mnc`, `cc` or `last_crc_fail`. They keep
their defaults unless the caller sets them.

## Installation

```
pip install .
```

Python 3.10 or later is required. The package has no runtime dependencies.

## Examples

Carrier frequencies:

```python
from tetradec.common import dl_carrier_hz, ul_carrier_hz

dl_carrier_hz(4, 1000, 0)          # 425000000
ul_carrier_hz(4, 1000, 0, 4, 0)    # 420000000 (5 MHz duplex spacing)
```

TDMA time arithmetic:

```python
from tetradec.tdma import TdmaTime

t = TdmaTime()
t.add_timeslots(5)
print(t.dump(), t.to_frame_number())   # 00/01/1/000 1
```

Parsing an LLC PDU, given as a sequence of bits:

```python
from tetradec.llc_pdu import parse_llc_pdu, llc_pdut_dec_name

pdu = parse_llc_pdu(bits)
print(llc_pdut_dec_name(pdu.pdu_type), pdu.tl_sdu)
```

Connecting the layers:

```python
from tetradec.burst import split_burst
from tetradec.burst_sync import BurstSynchronizer
from tetradec.common import MacState
from tetradec.llc import LlcEntity
from tetradec.mle import parse_tl_sdu
from tetradec.upper_mac import UpperMac

state = MacState()
llc = LlcEntity(lambda sdu: print(parse_tl_sdu(sdu).pdisc_name))
mac = UpperMac(state, llc)   # give it TmvUnitdata built from decoded blocks

def on_burst(bits, train_seq):
    for part in split_burst(bits, train_seq, sync.time, state):
        ...  # descramble, deinterleave, FEC-decode and CRC-check part.bits

sync = BurstSynchronizer(on_burst)
sync.feed(demodulated_bits)
```

## What the package does not do

- **No demodulation.** It does not turn samples into symbols or bits. Its
  input is a bit sequence.
- **No lower MAC processing.** There is no descrambling, deinterleaving,
  Viterbi/Reed-Muller decoding or CRC checking. The `BurstPart` blocks from
  `split_burst` must be decoded elsewhere before they are turned into
  `TmvUnitdata` for `UpperMac`.
- **No decryption.** Encrypted MAC PDUs are recognised but are not decrypted
  and are not passed on.
- **No further decoding above the MLE header.** Higher-layer PDUs are only
  classified and named. Voice traffic is not decoded.
- **No command-line program and no display.** `DisplayState` only holds the
  values.

## Running the tests

```
pip install .[test]
pytest
```