"""Tests for cardiovascular risk assessment."""
import pytest

from clinirisk.shared.models import CardiovascularRiskLevel, Gender
from clinirisk.services.risk_engine.cardiovascular import (
    ACUTE_CORONARY_SYNDROME,
    CARDIAC_SYNCOPE,
    assess_cardiovascular,
    classify,
    framingham_age_points,
)


class TestFraminghamAgePoints:

    @pytest.mark.parametrize("age,expected", [(72, 8), (65, 6), (50, 4), (41, 2), (39, 0)])
    def test_male_bands(self, age, expected):
        assert framingham_age_points(age, Gender.MALE) == expected

    @pytest.mark.parametrize("age,expected", [(72, 7), (65, 5), (50, 3), (41, 1), (39, 0)])
    def test_female_bands_one_point_lower(self, age, expected):
        assert framingham_age_points(age, Gender.FEMALE) == expected

    def test_unknown_gender_uses_male_bands(self):
        assert framingham_age_points(72, Gender.UNKNOWN) == 8

    def test_unknown_age_scores_zero(self):
        assert framingham_age_points(None, Gender.MALE) == 0


class TestScoring:

    def test_no_findings_is_low(self, data_factory):
        risk = assess_cardiovascular(data_factory(age=30, gender="feminino"))

        assert risk.overall_score == 0
        assert risk.risk_level is CardiovascularRiskLevel.LOW
        assert risk.escalation_required is False
        assert risk.time_to_escalation == 12

    def test_risk_factors_add_to_framingham(self, data_factory):
        data = data_factory(
            risk_factors=["fumante", "hipertensao", "colesterol_alto", "historico_familiar_cardiaco"],
            age=55,
            gender="masculino",
        )

        risk = assess_cardiovascular(data)

        # age 4 + smoking 4 + hypertension 3 + cholesterol 2 + family 2
        assert risk.framingham_score == 15
        assert risk.overall_score == 15
        assert risk.risk_level is CardiovascularRiskLevel.HIGH

    def test_symptom_points(self, data_factory):
        risk = assess_cardiovascular(data_factory(symptoms=["palpitacoes"]))

        assert risk.overall_score == 5
        assert risk.factors.palpitations is True
        assert risk.risk_level is CardiovascularRiskLevel.LOW

    def test_chest_pain_alone_is_high_without_emergency(self, data_factory):
        risk = assess_cardiovascular(data_factory(symptoms=["dor_peito"]))

        assert risk.overall_score == 15
        assert risk.risk_level is CardiovascularRiskLevel.HIGH
        assert risk.emergency_indicators == ()
        assert risk.time_to_escalation == 12

    def test_very_high_without_emergency_escalates_in_two_hours(self, data_factory):
        risk = assess_cardiovascular(data_factory(symptoms=["desmaio"]))

        assert risk.risk_level is CardiovascularRiskLevel.VERY_HIGH
        assert risk.emergency_indicators == ()
        assert risk.escalation_required is True
        assert risk.time_to_escalation == 2


class TestEmergencies:

    def test_acute_coronary_syndrome(self, data_factory):
        """Chest pain with dyspnea is a suspected ACS."""
        risk = assess_cardiovascular(data_factory(symptoms=["dor_peito", "falta_ar"]))

        assert ACUTE_CORONARY_SYNDROME in risk.emergency_indicators
        assert risk.risk_level is CardiovascularRiskLevel.VERY_HIGH
        assert risk.escalation_required is True
        assert risk.time_to_escalation == 0.5

    def test_cardiac_syncope(self, data_factory):
        risk = assess_cardiovascular(data_factory(symptoms=["sincope", "dor_toracica"]))

        assert risk.emergency_indicators == (CARDIAC_SYNCOPE,)
        assert risk.time_to_escalation <= 2

    def test_both_patterns(self, data_factory):
        risk = assess_cardiovascular(data_factory(symptoms=["dor_peito", "dispneia", "desmaio"]))

        assert risk.emergency_indicators == (ACUTE_CORONARY_SYNDROME, CARDIAC_SYNCOPE)


class TestRecommendations:

    def test_very_high_gets_emergency_workup(self, data_factory):
        risk = assess_cardiovascular(data_factory(symptoms=["dor_peito", "falta_ar"]))

        assert "Immediate 12-lead electrocardiogram" in risk.recommendations

    def test_smoking_and_hypertension(self, data_factory):
        risk = assess_cardiovascular(data_factory(risk_factors=["tabagismo", "pressao_alta"]))

        assert "Smoking cessation programme" in risk.recommendations
        assert "24-hour ambulatory blood pressure monitoring" in risk.recommendations

    def test_glycaemic_control_only_above_low(self, data_factory):
        low = assess_cardiovascular(data_factory(risk_factors=["diabetes_tipo_2"]))
        high = assess_cardiovascular(data_factory(symptoms=["dor_peito"], risk_factors=["diabetes_tipo_2"]))

        assert "Strict glycaemic control (HbA1c < 7%)" not in low.recommendations
        assert "Strict glycaemic control (HbA1c < 7%)" in high.recommendations


class TestMonotonicity:

    def test_buckets_monotone_in_score(self):
        ranks = [classify(score).rank for score in range(0, 60)]

        assert ranks == sorted(ranks)

    def test_escalation_time_non_increasing_with_level(self, data_factory):
        cases = [
            data_factory(),
            data_factory(symptoms=["dor_peito"]),
            data_factory(symptoms=["desmaio"]),
            data_factory(symptoms=["dor_peito", "falta_ar"]),
        ]
        risks = [assess_cardiovascular(d) for d in cases]
        times = [r.time_to_escalation for r in risks]

        assert [r.risk_level.rank for r in risks] == sorted(r.risk_level.rank for r in risks)
        assert times == sorted(times, reverse=True)
