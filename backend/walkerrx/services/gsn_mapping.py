"""
Local brand/generic name -> GSN (Generic Sequence Number) table.
Used to fill in GSNs when the pricing API returns search hits without one.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DrugGsnMapping:
    brand_name: str
    generic_name: str
    gsn: int


DRUG_GSN_MAPPINGS = tuple(DrugGsnMapping(*row) for row in (
    # Statins
    ("Lipitor", "Atorvastatin", 62733),
    ("Crestor", "Rosuvastatin", 75940),
    ("Zocor", "Simvastatin", 70956),
    ("Pravachol", "Pravastatin", 70954),
    # Blood pressure
    ("Lisinopril", "Lisinopril", 19675),
    ("Prinivil", "Lisinopril", 19675),
    ("Zestril", "Lisinopril", 19675),
    ("Norvasc", "Amlodipine", 19787),
    ("Toprol XL", "Metoprolol Succinate", 19839),
    ("Lopressor", "Metoprolol Tartrate", 19838),
    ("Tenormin", "Atenolol", 19853),
    ("Coreg", "Carvedilol", 21737),
    ("Diovan", "Valsartan", 21162),
    ("Cozaar", "Losartan", 21104),
    ("Benicar", "Olmesartan", 72063),
    ("Micardis", "Telmisartan", 21214),
    ("Avapro", "Irbesartan", 21109),
    ("Atacand", "Candesartan", 21107),
    ("Hyzaar", "Losartan/HCTZ", 21105),
    ("Diovan HCT", "Valsartan/HCTZ", 21163),
    ("Benicar HCT", "Olmesartan/HCTZ", 72064),
    ("Micardis HCT", "Telmisartan/HCTZ", 21215),
    ("Avalide", "Irbesartan/HCTZ", 21110),
    ("Atacand HCT", "Candesartan/HCTZ", 21108),
    # Thyroid
    ("Synthroid", "Levothyroxine", 12560),
    ("Levoxyl", "Levothyroxine", 12560),
    ("Unithroid", "Levothyroxine", 12560),
    ("Cytomel", "Liothyronine", 12565),
    ("Armour Thyroid", "Thyroid", 12568),
    # Diabetes
    ("Metformin", "Metformin", 17948),
    ("Glucophage", "Metformin", 17948),
    ("Glucophage XR", "Metformin ER", 17949),
    ("Januvia", "Sitagliptin", 77185),
    ("Janumet", "Sitagliptin/Metformin", 77186),
    ("Tradjenta", "Linagliptin", 91536),
    ("Jentadueto", "Linagliptin/Metformin", 91537),
    ("Onglyza", "Saxagliptin", 84749),
    ("Kombiglyze XR", "Saxagliptin/Metformin ER", 84750),
    ("Nesina", "Alogliptin", 99267),
    ("Kazano", "Alogliptin/Metformin", 99268),
    ("Oseni", "Alogliptin/Pioglitazone", 99269),
    ("Actos", "Pioglitazone", 21346),
    ("Avandia", "Rosiglitazone", 21347),
    ("Amaryl", "Glimepiride", 21344),
    ("Glucotrol", "Glipizide", 17950),
    ("Glucotrol XL", "Glipizide ER", 17951),
    ("DiaBeta", "Glyburide", 17952),
    ("Micronase", "Glyburide", 17952),
    ("Glynase", "Glyburide Micronized", 17953),
    # Anti-infectives
    ("Amoxil", "Amoxicillin", 1983),
    ("Augmentin", "Amoxicillin/Clavulanate", 1984),
    ("Zithromax", "Azithromycin", 3227),
    ("Biaxin", "Clarithromycin", 3228),
    ("Keflex", "Cephalexin", 2001),
    ("Cipro", "Ciprofloxacin", 3542),
    ("Levaquin", "Levofloxacin", 3544),
    ("Bactrim", "Sulfamethoxazole/Trimethoprim", 8597),
    ("Septra", "Sulfamethoxazole/Trimethoprim", 8597),
    ("Flagyl", "Metronidazole", 4103),
    ("Diflucan", "Fluconazole", 4133),
    ("Valtrex", "Valacyclovir", 4139),
    ("Zovirax", "Acyclovir", 4138),
    ("Tamiflu", "Oseltamivir", 50635),
    ("Relenza", "Zanamivir", 50636),
    # Pain
    ("Tylenol", "Acetaminophen", 1790),
    ("Advil", "Ibuprofen", 1780),
    ("Motrin", "Ibuprofen", 1780),
    ("Aleve", "Naproxen", 1782),
    ("Naprosyn", "Naproxen", 1782),
    ("Celebrex", "Celecoxib", 50420),
    # ADHD
    ("Vyvanse", "Lisdexamfetamine", 77288),
    ("Adderall", "Amphetamine/Dextroamphetamine", 11819),
    ("Adderall XR", "Amphetamine/Dextroamphetamine ER", 11820),
    ("Ritalin", "Methylphenidate", 11830),
    ("Concerta", "Methylphenidate ER", 11831),
    ("Strattera", "Atomoxetine", 72122),
    ("Focalin", "Dexmethylphenidate", 50690),
    ("Focalin XR", "Dexmethylphenidate ER", 50691),
))


def find_mapping_by_name(drug_name: str) -> Optional[DrugGsnMapping]:
    """First entry whose brand or generic name matches, case-insensitively."""
    needle = (drug_name or "").strip().lower()
    if not needle:
        return None
    for mapping in DRUG_GSN_MAPPINGS:
        if mapping.brand_name.lower() == needle or mapping.generic_name.lower() == needle:
            return mapping
    return None


def find_gsn_by_drug_name(drug_name: str) -> Optional[int]:
    mapping = find_mapping_by_name(drug_name)
    return mapping.gsn if mapping else None


def find_drug_by_gsn(gsn: int) -> Optional[DrugGsnMapping]:
    return next((m for m in DRUG_GSN_MAPPINGS if m.gsn == gsn), None)


def enrich_with_gsn(hits: list[dict]) -> list[dict]:
    """Fill in missing GSNs from the local table. Returns new dicts."""
    enriched = []
    for hit in hits:
        hit = dict(hit)
        if not hit.get("gsn"):
            gsn = find_gsn_by_drug_name(hit.get("drugName", ""))
            if gsn is not None:
                hit["gsn"] = gsn
        enriched.append(hit)
    return enriched
