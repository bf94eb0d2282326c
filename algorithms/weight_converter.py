class WeightConverter:
    """Utility for converting between kg and lbs."""

    LBS_TO_KG = 0.453592

    @staticmethod
    def lbs_to_kg(lbs: float) -> float:
        return lbs * WeightConverter.LBS_TO_KG

    @staticmethod
    def kg_to_lbs(kg: float) -> float:
        return kg / WeightConverter.LBS_TO_KG

    @staticmethod
    def to_kg(weight: float, unit: str) -> float:
        """Return ``weight`` expressed in kg."""
        if unit == "lbs":
            return WeightConverter.lbs_to_kg(weight)
        if unit == "kg":
            return weight
        raise ValueError("unit must be kg or lbs")
