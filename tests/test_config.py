import json

import pytest

from iotacore.config import (
    ChannelType,
    InputChannel,
    configure_inputs,
    make_channels,
    parse_dst_rule,
    parse_sim_solar,
)


def test_make_channels_names():
    channels = make_channels(3)
    assert [c.name for c in channels] == ["Input(0)", "Input(1)", "Input(2)"]
    assert [c.channel for c in channels] == [0, 1, 2]
    assert not any(c.active for c in channels)


def test_make_channels_rejects_zero():
    with pytest.raises(ValueError):
        make_channels(0)


def test_configure_voltage_channel():
    channels = make_channels(2)
    configure_inputs(channels, [{"channel": 0, "name": "Voltage", "type": "VT", "cal": 10.5, "vref": 1}])
    vt = channels[0]
    assert vt.type is ChannelType.VOLTAGE
    assert vt.name == "Voltage"
    assert vt.calibration == 10.5
    assert vt.vchannel == 0
    assert vt.active is True
    assert vt.vmult == 1.0


def test_configure_power_channel_from_json_text():
    channels = make_channels(2)
    text = json.dumps(
        [
            {"channel": 0, "name": "V", "type": "VT", "cal": 10},
            {"channel": 1, "name": "Main", "type": "CT", "vchan": 0, "signed": True, "double": True, "vmult": 1.5},
        ]
    )
    configure_inputs(channels, text)
    ct = channels[1]
    assert ct.type is ChannelType.POWER
    assert ct.signed is True
    assert ct.double is True
    assert ct.vmult == 3.0
    assert ct.vchannel == 0


def test_turns_and_burden_give_calibration():
    channels = make_channels(1)
    channels[0].burden = 20.0
    configure_inputs(channels, [{"channel": 0, "type": "CT", "turns": 2000, "cal": 99}])
    assert channels[0].calibration == pytest.approx(2000 / 20.0)


def test_channel_mismatch_is_skipped():
    channels = make_channels(2)
    configure_inputs(channels, [{"channel": 1, "name": "Wrong", "type": "CT"}])
    assert channels[0].name == "Input(0)"
    assert channels[0].active is False


def test_non_object_resets_channel():
    channels = make_channels(1)
    configure_inputs(channels, [{"channel": 0, "name": "X", "type": "CT"}])
    assert channels[0].active is True
    configure_inputs(channels, [None])
    assert channels[0].active is False
    assert channels[0].type is ChannelType.UNDEFINED
    assert channels[0].name == "Input(0)"


def test_old_tdc_model_name_fixed():
    channels = make_channels(1)
    configure_inputs(channels, [{"channel": 0, "type": "CT", "model": "TDC DA-10-09(USA)"}])
    assert channels[0].model == "TDC DA-10-09"


def test_extra_inputs_ignored():
    channels = make_channels(1)
    configure_inputs(channels, [{"channel": 0, "type": "VT"}, {"channel": 1, "type": "CT"}])
    assert len(channels) == 1
    assert channels[0].type is ChannelType.VOLTAGE


def test_configure_inputs_bad_json():
    with pytest.raises(ValueError):
        configure_inputs(make_channels(1), "[{not json")


def test_parse_dst_rule():
    rule = parse_dst_rule(
        '{"adj":60,"utc":false,'
        '"begin":{"month":3,"weekday":1,"instance":2,"time":120},'
        '"end":{"month":11,"weekday":1,"instance":1,"time":120}}'
    )
    assert rule.adj_minutes == 60
    assert rule.use_utc is False
    assert (rule.beg_period.month, rule.beg_period.weekday, rule.beg_period.instance, rule.beg_period.time) == (3, 1, 2, 120)
    assert (rule.end_period.month, rule.end_period.instance) == (11, 1)


def test_parse_dst_rule_invalid():
    with pytest.raises(ValueError):
        parse_dst_rule("not json")
    with pytest.raises(ValueError):
        parse_dst_rule("[1,2]")


def test_parse_sim_solar_peak_at_noon():
    solar = parse_sim_solar({"sunrise": 600, "sunset": 1800, "power": 2000})
    assert solar.power(12 * 3600) == pytest.approx(2000.0)
    assert solar.power(3 * 3600) == pytest.approx(0.0)


def test_parse_sim_solar_invalid():
    with pytest.raises(ValueError):
        parse_sim_solar("{broken")


def test_input_channel_reset_keeps_hardware():
    channel = InputChannel(4)
    channel.burden = 24.0
    channel.active = True
    channel.name = "Custom"
    channel.reset()
    assert channel.burden == 24.0
    assert channel.addr == 4
    assert channel.active is False
    assert channel.name == "Input(4)"