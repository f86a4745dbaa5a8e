import pytest

from pvcharger.balance import BalanceKind, PowerBalance
from pvcharger.power import Power


def _watt(balance):
    return balance.spare_power().in_watt()


def test_spare_power_per_shape():
    base = PowerBalance.for_solar(Power.of_watt(1500))

    assert _watt(base.feeding_in(Power.of_watt(300))) == pytest.approx(300)
    assert _watt(base.consuming(Power.of_watt(300))) == pytest.approx(-300)
    assert PowerBalance.neutral(Power.of_watt(1500)).spare_power() == Power.NONE


def test_external_power():
    base = PowerBalance.for_solar(Power.of_watt(1500))

    drawing = base.consuming(Power.of_watt(400))
    assert drawing.uses_external_power()
    assert drawing.external_power().in_watt() == pytest.approx(400)

    assert not base.feeding_in(Power.of_watt(400)).uses_external_power()
    assert PowerBalance.NONE.external_power() == Power.NONE


def test_predict_adds_consumption():
    base = PowerBalance.for_solar(Power.of_watt(1500))

    predicted = base.consuming(Power.of_watt(200)).predict(Power.of_watt(400))
    assert predicted.kind is BalanceKind.DRAWING
    assert predicted.external_power().in_watt() == pytest.approx(600)
    assert predicted.solar_power == base.solar


def test_predict_flips_feeding_to_drawing():
    base = PowerBalance.for_solar(Power.of_watt(1500))

    predicted = base.feeding_in(Power.of_watt(200)).predict(Power.of_watt(400))
    assert predicted.kind is BalanceKind.DRAWING
    assert _watt(predicted) == pytest.approx(-200)


def test_predict_flips_drawing_to_feeding():
    base = PowerBalance.for_solar(Power.of_watt(1500))

    predicted = base.consuming(Power.of_watt(200)).predict(Power.of_watt(-500))
    assert predicted.kind is BalanceKind.FEEDING
    assert _watt(predicted) == pytest.approx(300)


def test_predict_from_neutral():
    neutral = PowerBalance.neutral(Power.of_watt(800))

    assert neutral.predict(Power.NONE) is neutral
    assert neutral.predict(Power.of_watt(100)).kind is BalanceKind.DRAWING

    feeding = neutral.predict(Power.of_watt(-100))
    assert feeding.kind is BalanceKind.FEEDING
    assert _watt(feeding) == pytest.approx(100)


def test_rejects_negative_magnitudes():
    with pytest.raises(ValueError):
        PowerBalance.drawing(Power.of_watt(100), Power.of_watt(-5))
    with pytest.raises(ValueError):
        PowerBalance.feeding_in(Power.of_watt(-100), Power.of_watt(5))


def test_str():
    base = PowerBalance.for_solar(Power.of_watt(1100))
    assert str(base.consuming(Power.of_watt(220))) == "Consuming(solar = 1100.0W, external = 220.0W)"
    assert str(PowerBalance.NONE) == "Neutral(solar = 0.0W)"
