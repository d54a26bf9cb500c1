"""
Static mock datasets used in mock mode and as a fallback when the pricing
API fails. Process-wide constants: accessors always hand out copies.
"""

import copy
from typing import Optional

_AMOXICILLIN = {
    "brandName": "Amoxil",
    "genericName": "Amoxicillin",
    "description": (
        "Amoxicillin is a penicillin antibiotic that fights bacteria. It is used to treat many "
        "different types of infection caused by bacteria, such as tonsillitis, bronchitis, "
        "pneumonia, and infections of the ear, nose, throat, skin, or urinary tract."
    ),
    "sideEffects": (
        "Common side effects include nausea, vomiting, diarrhea, stomach pain, headache, rash, "
        "and allergic reactions."
    ),
    "dosage": "250mg, 500mg, 875mg tablets or capsules",
    "storage": "Store at room temperature away from moisture, heat, and light.",
    "contraindications": "Do not use if you are allergic to penicillin antibiotics.",
}

_LISINOPRIL = {
    "brandName": "Prinivil, Zestril",
    "genericName": "Lisinopril",
    "description": (
        "Lisinopril is an ACE inhibitor that is used to treat high blood pressure (hypertension) "
        "in adults and children who are at least 6 years old. It is also used to treat heart "
        "failure in adults, or to improve survival after a heart attack."
    ),
    "sideEffects": "Common side effects include headache, dizziness, cough, and low blood pressure.",
    "dosage": "5mg, 10mg, 20mg, 40mg tablets",
    "storage": "Store at room temperature away from moisture and heat.",
    "contraindications": "Do not use if you are pregnant or have a history of angioedema.",
}

_ATORVASTATIN = {
    "brandName": "Lipitor",
    "genericName": "Atorvastatin",
    "description": (
        'Atorvastatin is used to lower blood levels of "bad" cholesterol (low-density '
        'lipoprotein, or LDL), to increase levels of "good" cholesterol (high-density '
        "lipoprotein, or HDL), and to lower triglycerides."
    ),
    "sideEffects": (
        "Common side effects include joint pain, diarrhea, urinary tract infections, and muscle pain."
    ),
    "dosage": "10mg, 20mg, 40mg, 80mg tablets",
    "storage": "Store at room temperature away from moisture and heat.",
    "contraindications": "Do not use if you have liver disease or if you are pregnant.",
}

_VYVANSE = {
    "brandName": "Vyvanse",
    "genericName": "Lisdexamfetamine",
    "description": (
        "Vyvanse (lisdexamfetamine) is a central nervous system stimulant used to treat attention "
        "deficit hyperactivity disorder (ADHD) in adults and children 6 years of age and older. "
        "It is also used to treat moderate to severe binge eating disorder in adults. Vyvanse is "
        "a federally controlled substance (CII) because it can be abused or lead to dependence."
    ),
    "sideEffects": (
        "Common side effects include decreased appetite, insomnia, dry mouth, increased heart "
        "rate, anxiety, irritability, and weight loss. More serious side effects may include "
        "heart problems, psychiatric issues, circulation problems, and slowed growth in children."
    ),
    "dosage": "10mg, 20mg, 30mg, 40mg, 50mg, 60mg, 70mg capsules",
    "storage": (
        "Store at room temperature in a cool, dry place away from direct sunlight. "
        "Keep away from moisture and heat."
    ),
    "contraindications": (
        "Do not use if you have heart problems, high blood pressure, hyperthyroidism, glaucoma, "
        "or if you are taking MAO inhibitors."
    ),
}

_METFORMIN = {
    "brandName": "Glucophage",
    "genericName": "Metformin",
    "description": (
        "Metformin is used to treat type 2 diabetes. It helps control blood sugar levels by "
        "improving the way your body handles insulin."
    ),
    "sideEffects": (
        "Common side effects include nausea, vomiting, stomach upset, diarrhea, and metallic "
        "taste in the mouth."
    ),
    "dosage": "500mg, 850mg, 1000mg tablets",
    "storage": "Store at room temperature away from moisture and heat.",
    "contraindications": "Do not use if you have severe kidney disease or metabolic acidosis.",
}

_LEVOTHYROXINE = {
    "brandName": "Synthroid",
    "genericName": "Levothyroxine",
    "description": (
        "Levothyroxine is used to treat hypothyroidism (low thyroid hormone). It replaces the "
        "hormone normally produced by the thyroid gland."
    ),
    "sideEffects": "Side effects may include headache, nervousness, irritability, and insomnia.",
    "dosage": (
        "25mcg, 50mcg, 75mcg, 88mcg, 100mcg, 112mcg, 125mcg, 137mcg, 150mcg, 175mcg, 200mcg, "
        "300mcg tablets"
    ),
    "storage": "Store at room temperature away from light and moisture.",
    "contraindications": (
        "Do not use if you have untreated adrenal gland problems or thyrotoxicosis."
    ),
}

# Keyed by lowercase drug name
MOCK_DRUG_DATA = {
    "amoxicillin": _AMOXICILLIN,
    "lisinopril": _LISINOPRIL,
    "atorvastatin": _ATORVASTATIN,
    "vyvanse": _VYVANSE,
    "metformin": _METFORMIN,
    "levothyroxine": _LEVOTHYROXINE,
}

MOCK_DRUG_DATA_BY_GSN = {
    1234: _AMOXICILLIN,
    2345: _LISINOPRIL,
    3456: _ATORVASTATIN,
    4567: _METFORMIN,
    5678: _LEVOTHYROXINE,
    6578: _VYVANSE,
}


def _mock_pharmacy(name, chain_code, address, phone, distance, price, uc_price):
    return {
        "name": name,
        "chainCode": chain_code,
        "npi": None,
        "address": address,
        "city": "Austin",
        "state": "TX",
        "zipCode": "78759",
        "phone": phone,
        "latitude": None,
        "longitude": None,
        "distance": distance,
        "price": price,
        "usualAndCustomaryPrice": uc_price,
    }


MOCK_PHARMACY_PRICES = [
    _mock_pharmacy("Walgreens", "WAG", "9600 Great Hills Trl", "512-555-0101", 0.8, 12.99, 18.49),
    _mock_pharmacy("CVS Pharmacy", "CVS", "10225 Research Blvd", "512-555-0102", 1.2, 14.50, 21.99),
    _mock_pharmacy("Walmart Pharmacy", "WMT", "9411 Parmer Ln", "512-555-0103", 2.5, 9.99, 15.00),
    _mock_pharmacy("Rite Aid", "RAD", "12901 N Mopac Expy", "512-555-0104", 3.1, 13.75, 19.25),
    _mock_pharmacy("Target Pharmacy", "TGT", "10107 Research Blvd", "512-555-0105", 4.0, 11.25, 16.75),
]

MOCK_DRUG_SEARCH_RESULTS = [
    {"drugName": "Amoxicillin", "gsn": 1234},
    {"drugName": "Lisinopril", "gsn": 2345},
    {"drugName": "Atorvastatin", "gsn": 3456},
    {"drugName": "Metformin", "gsn": 4567},
    {"drugName": "Levothyroxine", "gsn": 5678},
    {"drugName": "Amlodipine", "gsn": 6789},
    {"drugName": "Metoprolol", "gsn": 7890},
    {"drugName": "Albuterol", "gsn": 8901},
    {"drugName": "Omeprazole", "gsn": 9012},
    {"drugName": "Losartan", "gsn": 1023},
    {"drugName": "Gabapentin", "gsn": 2134},
    {"drugName": "Hydrochlorothiazide", "gsn": 3245},
    {"drugName": "Sertraline", "gsn": 4356},
    {"drugName": "Simvastatin", "gsn": 5467},
    {"drugName": "Vyvanse", "gsn": 6578},
    {"drugName": "Triamcinolone", "gsn": 7689},
    {"drugName": "Trimethoprim", "gsn": 8790},
    {"drugName": "Triamterene", "gsn": 9801},
    {"drugName": "Triptorelin", "gsn": 1012},
    {"drugName": "Trifluoperazine", "gsn": 2123},
    {"drugName": "Advair Diskus", "gsn": 3001},
    {"drugName": "Advair HFA", "gsn": 3002},
    {"drugName": "Advance Plus Intermittent", "gsn": 3003},
    {"drugName": "Advanced Acne Spot Treatment", "gsn": 3004},
    {"drugName": "Advanced Acne Wash", "gsn": 3005},
    {"drugName": "Advanced Allergy Collect Kit", "gsn": 3006},
    {"drugName": "Advanced Antacid-Antigas", "gsn": 3007},
    {"drugName": "Advanced Antibacterial Bandage", "gsn": 3008},
    {"drugName": "Advanced Calcium", "gsn": 3009},
    {"drugName": "Adderall", "gsn": 3010},
    {"drugName": "Adderall XR", "gsn": 3011},
    {"drugName": "Advil", "gsn": 3012},
    {"drugName": "Adzenys XR-ODT", "gsn": 3013},
    {"drugName": "Allegra", "gsn": 3014},
    {"drugName": "Ambien", "gsn": 3015},
    {"drugName": "Amitriptyline", "gsn": 3016},
    {"drugName": "Amoxicillin-Clavulanate", "gsn": 3017},
    {"drugName": "Amphetamine Salt Combo", "gsn": 3018},
    {"drugName": "Atenolol", "gsn": 3019},
    {"drugName": "Azithromycin", "gsn": 3020},
    {"drugName": "Bupropion", "gsn": 3021},
    {"drugName": "Cephalexin", "gsn": 3022},
    {"drugName": "Ciprofloxacin", "gsn": 3023},
    {"drugName": "Citalopram", "gsn": 3024},
    {"drugName": "Clonazepam", "gsn": 3025},
    {"drugName": "Cyclobenzaprine", "gsn": 3026},
    {"drugName": "Duloxetine", "gsn": 3027},
    {"drugName": "Escitalopram", "gsn": 3028},
    {"drugName": "Fluoxetine", "gsn": 3029},
    {"drugName": "Ibuprofen", "gsn": 3030},
    {"drugName": "Lexapro", "gsn": 3031},
    {"drugName": "Loratadine", "gsn": 3032},
    {"drugName": "Meloxicam", "gsn": 3033},
    {"drugName": "Naproxen", "gsn": 3034},
    {"drugName": "Pantoprazole", "gsn": 3035},
    {"drugName": "Prednisone", "gsn": 3036},
    {"drugName": "Quetiapine", "gsn": 3037},
    {"drugName": "Trazodone", "gsn": 3038},
    {"drugName": "Xanax", "gsn": 3039},
    {"drugName": "Zoloft", "gsn": 3040},
]

# Same-class substitutes, keyed by lowercase generic name
THERAPEUTIC_ALTERNATIVES = {
    "atorvastatin": ["Rosuvastatin", "Simvastatin", "Pravastatin"],
    "rosuvastatin": ["Atorvastatin", "Simvastatin"],
    "simvastatin": ["Atorvastatin", "Pravastatin"],
    "lisinopril": ["Losartan", "Valsartan"],
    "losartan": ["Valsartan", "Lisinopril"],
    "amlodipine": ["Lisinopril", "Losartan"],
    "metformin": ["Glipizide", "Sitagliptin"],
    "amoxicillin": ["Cephalexin", "Azithromycin"],
    "azithromycin": ["Amoxicillin", "Clarithromycin"],
    "ibuprofen": ["Naproxen", "Celecoxib"],
    "naproxen": ["Ibuprofen", "Celecoxib"],
    "lisdexamfetamine": ["Amphetamine/Dextroamphetamine", "Methylphenidate"],
    "sertraline": ["Escitalopram", "Fluoxetine"],
    "escitalopram": ["Sertraline", "Citalopram"],
}


# ── Accessors ──

def get_mock_drug_info(drug_name: str) -> Optional[dict]:
    """Mock DrugDetails for a known drug name, else None."""
    record = MOCK_DRUG_DATA.get((drug_name or "").strip().lower())
    return copy.deepcopy(record) if record else None


def get_mock_drug_info_by_gsn(gsn: int) -> Optional[dict]:
    record = MOCK_DRUG_DATA_BY_GSN.get(gsn)
    if not record:
        return None
    details = copy.deepcopy(record)
    details["gsn"] = gsn
    return details


def get_mock_pharmacy_prices() -> list[dict]:
    return copy.deepcopy(MOCK_PHARMACY_PRICES)


def get_mock_pharmacies(count: int = 10) -> list[dict]:
    """Mock pharmacy directory entries (no price fields)."""
    pharmacies = []
    for record in MOCK_PHARMACY_PRICES[:count]:
        entry = dict(record)
        entry.pop("price")
        entry.pop("usualAndCustomaryPrice")
        pharmacies.append(entry)
    return pharmacies


def get_mock_search_results(query: str) -> list[dict]:
    """Case-insensitive substring match over the mock search catalog."""
    needle = (query or "").strip().lower()
    return [dict(hit) for hit in MOCK_DRUG_SEARCH_RESULTS if needle in hit["drugName"].lower()]


def get_therapeutic_alternatives(generic_name: str) -> list[str]:
    return list(THERAPEUTIC_ALTERNATIVES.get((generic_name or "").strip().lower(), []))
