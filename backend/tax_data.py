"""
Tax Data Module
===============
Bracket tables and rate constants for every modeled jurisdiction.
Figures are simplified 2024/25 approximations in local currency, not
authoritative tax tables.

Tables are BracketTable instances built at import time, so a malformed table
raises ConfigurationError as soon as the module loads.

Conventions:
    - (lower, upper, rate) with upper None for the unbounded top bracket
    - rates are fractions
    - all amounts are annual unless the name says MONTHLY
"""

from brackets import BracketTable

# ═══════════════════════════════════════════════════════════════════════════════
# UNITED STATES (USD)
# ═══════════════════════════════════════════════════════════════════════════════

US_FEDERAL_BRACKETS = {
    "single": BracketTable(
        [
            (0, 11_600, 0.10),
            (11_600, 47_150, 0.12),
            (47_150, 100_525, 0.22),
            (100_525, 191_950, 0.24),
            (191_950, 243_725, 0.32),
            (243_725, 609_350, 0.35),
            (609_350, None, 0.37),
        ],
        name="US federal (single)",
    ),
    "married": BracketTable(
        [
            (0, 23_200, 0.10),
            (23_200, 94_300, 0.12),
            (94_300, 201_050, 0.22),
            (201_050, 383_900, 0.24),
            (383_900, 487_450, 0.32),
            (487_450, 731_200, 0.35),
            (731_200, None, 0.37),
        ],
        name="US federal (married)",
    ),
    "head_of_household": BracketTable(
        [
            (0, 16_550, 0.10),
            (16_550, 63_100, 0.12),
            (63_100, 100_500, 0.22),
            (100_500, 191_950, 0.24),
            (191_950, 243_700, 0.32),
            (243_700, 609_350, 0.35),
            (609_350, None, 0.37),
        ],
        name="US federal (head of household)",
    ),
}

US_STANDARD_DEDUCTION = {
    "single": 14_600,
    "married": 29_200,
    "head_of_household": 21_900,
}

US_RETIREMENT_CONTRIBUTION_CAP = 23_000  # 401(k) elective deferral
US_HSA_CONTRIBUTION_CAP = 4_150  # self-only coverage

US_SS_RATE = 0.062
US_SS_WAGE_BASE = 168_600
US_MEDICARE_RATE = 0.0145
US_ADDITIONAL_MEDICARE_RATE = 0.009
US_ADDITIONAL_MEDICARE_THRESHOLD = {
    "single": 200_000,
    "married": 250_000,
    "head_of_household": 200_000,
}

# States with their own progressive tables (single filer)
US_STATE_BRACKETS = {
    "CA": BracketTable(
        [
            (0, 10_756, 0.01),
            (10_756, 25_499, 0.02),
            (25_499, 40_245, 0.04),
            (40_245, 55_866, 0.06),
            (55_866, 70_606, 0.08),
            (70_606, 360_659, 0.093),
            (360_659, 432_787, 0.103),
            (432_787, 721_314, 0.113),
            (721_314, None, 0.123),
        ],
        name="California",
    ),
    "NY": BracketTable(
        [
            (0, 8_500, 0.04),
            (8_500, 11_700, 0.045),
            (11_700, 13_900, 0.0525),
            (13_900, 80_650, 0.055),
            (80_650, 215_400, 0.06),
            (215_400, 1_077_550, 0.0685),
            (1_077_550, 5_000_000, 0.0965),
            (5_000_000, 25_000_000, 0.103),
            (25_000_000, None, 0.109),
        ],
        name="New York",
    ),
}

US_STATE_DEDUCTIONS = {
    "CA": 5_540,
    "NY": 8_000,
}

# Everything else is a flat effective rate on gross income
US_STATE_FLAT_RATES = {
    "TX": 0.0,
    "FL": 0.0,
    "WA": 0.0,
    "NV": 0.0,
    "TN": 0.0,
    "SD": 0.0,
    "WY": 0.0,
    "AK": 0.0,
    "NH": 0.0,
    "IL": 0.0495,
    "PA": 0.0307,
    "OH": 0.0399,
    "GA": 0.0549,
    "NC": 0.045,
    "MA": 0.05,
    "CO": 0.044,
    "AZ": 0.025,
    "MI": 0.0425,
    "NJ": 0.0637,
    "VA": 0.0575,
}
US_DEFAULT_STATE_RATE = 0.05

US_NYC_BRACKETS = BracketTable(
    [
        (0, 12_000, 0.03078),
        (12_000, 25_000, 0.03762),
        (25_000, 50_000, 0.03819),
        (50_000, None, 0.03876),
    ],
    name="New York City",
)


# ═══════════════════════════════════════════════════════════════════════════════
# CANADA (CAD)
# ═══════════════════════════════════════════════════════════════════════════════

CA_FEDERAL_BRACKETS = BracketTable(
    [
        (0, 55_867, 0.15),
        (55_867, 111_733, 0.205),
        (111_733, 173_205, 0.26),
        (173_205, 246_752, 0.29),
        (246_752, None, 0.33),
    ],
    name="Canada federal",
)
CA_FEDERAL_PERSONAL_AMOUNT = 15_705
CA_RRSP_CONTRIBUTION_CAP = 31_560

CA_ONTARIO_BRACKETS = BracketTable(
    [
        (0, 51_446, 0.0505),
        (51_446, 102_894, 0.0915),
        (102_894, 150_000, 0.1116),
        (150_000, 220_000, 0.1216),
        (220_000, None, 0.1316),
    ],
    name="Ontario",
)
CA_ONTARIO_PERSONAL_AMOUNT = 12_399

# Ontario surtax: (threshold on basic provincial tax, rate)
CA_ONTARIO_SURTAX = [
    (5_554, 0.20),
    (7_108, 0.36),
]

# Ontario Health Premium: (income floor, income ceiling, base, phase-in rate, band cap)
CA_ONTARIO_HEALTH_PREMIUM = [
    (20_000, 36_000, 0, 0.06, 300),
    (36_000, 48_000, 300, 0.06, 150),
    (48_000, 72_000, 450, 0.25, 150),
    (72_000, 200_000, 600, 0.25, 150),
    (200_000, None, 750, 0.25, 150),
]

# Flat effective provincial rates for provinces without a modeled table
CA_PROVINCIAL_FLAT_RATES = {
    "BC": 0.0806,
    "AB": 0.10,
    "QC": 0.15,
    "NS": 0.1125,
    "NB": 0.1045,
    "MB": 0.1125,
    "SK": 0.1125,
    "PE": 0.106,
    "NL": 0.0937,
    "NT": 0.0749,
    "NU": 0.05,
    "YT": 0.075,
}
CA_PROVINCES = frozenset(CA_PROVINCIAL_FLAT_RATES) | {"ON"}

CA_CPP_RATE = 0.0595
CA_CPP_MAX_EARNINGS = 68_500
CA_CPP_BASIC_EXEMPTION = 3_500
CA_EI_RATE = 0.0166
CA_EI_MAX_EARNINGS = 63_200


# ═══════════════════════════════════════════════════════════════════════════════
# UNITED KINGDOM (GBP)
# ═══════════════════════════════════════════════════════════════════════════════

UK_PERSONAL_ALLOWANCE = 12_570
UK_PA_TAPER_START = 100_000
UK_PENSION_ANNUAL_ALLOWANCE = 60_000

# Bands apply to income above the personal allowance
UK_INCOME_BRACKETS = BracketTable(
    [
        (0, 37_700, 0.20),
        (37_700, 125_140, 0.40),
        (125_140, None, 0.45),
    ],
    name="UK income tax (rUK)",
)

UK_SCOTTISH_BRACKETS = BracketTable(
    [
        (0, 2_306, 0.19),
        (2_306, 13_991, 0.20),
        (13_991, 31_092, 0.21),
        (31_092, 62_430, 0.42),
        (62_430, 112_570, 0.45),
        (112_570, None, 0.48),
    ],
    name="UK income tax (Scotland)",
)

UK_NI_BRACKETS = BracketTable(
    [
        (0, 12_570, 0.0),
        (12_570, 50_270, 0.08),
        (50_270, None, 0.02),
    ],
    name="UK National Insurance",
)

# plan -> (repayment threshold, rate)
UK_STUDENT_LOAN_PLANS = {
    "plan1": (24_990, 0.09),
    "plan2": (27_295, 0.09),
    "plan4": (31_395, 0.09),
    "plan5": (25_000, 0.09),
    "postgrad": (21_000, 0.06),
}


# ═══════════════════════════════════════════════════════════════════════════════
# AUSTRALIA (AUD)
# ═══════════════════════════════════════════════════════════════════════════════

AU_INCOME_BRACKETS = BracketTable(
    [
        (0, 18_200, 0.0),
        (18_200, 45_000, 0.16),
        (45_000, 135_000, 0.30),
        (135_000, 190_000, 0.37),
        (190_000, None, 0.45),
    ],
    name="Australia resident",
)
AU_MEDICARE_LEVY_RATE = 0.02
AU_SUPER_CONCESSIONAL_CAP = 27_500

# Medicare levy surcharge tiers: (single threshold, family threshold, rate on whole income)
AU_MLS_TIERS = [
    (97_000, 194_000, 0.01),
    (113_000, 226_000, 0.0125),
    (151_000, 302_000, 0.015),
]


# ═══════════════════════════════════════════════════════════════════════════════
# GERMANY (EUR)
# ═══════════════════════════════════════════════════════════════════════════════

# The statutory formula is linear-progressive between 11,604 and 66,760;
# the two middle brackets carry the average rate of each progression zone.
DE_INCOME_BRACKETS = BracketTable(
    [
        (0, 11_604, 0.0),
        (11_604, 17_005, 0.19),
        (17_005, 66_760, 0.33),
        (66_760, 277_825, 0.42),
        (277_825, None, 0.45),
    ],
    name="Germany income tax",
)

DE_EMPLOYEE_ALLOWANCE = 1_230  # Arbeitnehmer-Pauschbetrag
DE_INSURANCE_DEDUCTION_CAP = 5_000  # private premiums on top of statutory contributions
DE_SOLI_RATE = 0.055
DE_SOLI_THRESHOLD = 18_130  # on assessed income tax
DE_CHURCH_TAX_RATES = {0.08, 0.09}
DE_DEFAULT_CHURCH_TAX_RATE = 0.09

# Employee shares of social insurance
DE_PENSION_RATE = 0.093
DE_UNEMPLOYMENT_RATE = 0.013
DE_PENSION_CAP = 90_600
DE_HEALTH_RATE = 0.073 + 0.0085  # general rate + half the average add-on
DE_CARE_RATE = 0.017
DE_CARE_CHILDLESS_SURCHARGE = 0.006
DE_CARE_CHILDLESS_MIN_AGE = 23
DE_HEALTH_CAP = 62_100


# ═══════════════════════════════════════════════════════════════════════════════
# FRANCE (EUR)
# ═══════════════════════════════════════════════════════════════════════════════

FR_INCOME_BRACKETS = BracketTable(
    [
        (0, 11_294, 0.0),
        (11_294, 28_797, 0.11),
        (28_797, 82_341, 0.30),
        (82_341, 177_106, 0.41),
        (177_106, None, 0.45),
    ],
    name="France income tax (per part)",
)
FR_PROFESSIONAL_ABATEMENT_RATE = 0.10
FR_PROFESSIONAL_ABATEMENT_MIN = 495
FR_PROFESSIONAL_ABATEMENT_MAX = 14_171

FR_SOCIAL_CEILING = 46_368  # plafond annuel de la sécurité sociale
FR_SOCIAL_CAPPED_RATE = 0.069 + 0.0401  # old-age (capped) + complementary pension T1
FR_SOCIAL_UNCAPPED_RATE = 0.004
FR_CSG_CRDS_RATE = 0.092 + 0.005
FR_CSG_BASE_FACTOR = 0.9825


# ═══════════════════════════════════════════════════════════════════════════════
# BRAZIL (BRL): monthly tables, annualized at calculation time
# ═══════════════════════════════════════════════════════════════════════════════

BR_IRPF_MONTHLY_BRACKETS = BracketTable(
    [
        (0, 2_259.20, 0.0),
        (2_259.20, 2_826.65, 0.075),
        (2_826.65, 3_751.05, 0.15),
        (3_751.05, 4_664.68, 0.225),
        (4_664.68, None, 0.275),
    ],
    name="Brazil IRPF (monthly)",
)

BR_INSS_MONTHLY_BRACKETS = BracketTable(
    [
        (0, 1_412.00, 0.075),
        (1_412.00, 2_666.68, 0.09),
        (2_666.68, 4_000.03, 0.12),
        (4_000.03, 7_786.02, 0.14),
        (7_786.02, None, 0.0),  # contribution ceiling
    ],
    name="Brazil INSS (monthly)",
)
BR_DEPENDENT_DEDUCTION_MONTHLY = 189.59
BR_HEALTH_PLAN_RATE = 0.05


# ═══════════════════════════════════════════════════════════════════════════════
# SOUTH AFRICA (ZAR)
# ═══════════════════════════════════════════════════════════════════════════════

ZA_INCOME_BRACKETS = BracketTable(
    [
        (0, 237_100, 0.18),
        (237_100, 370_500, 0.26),
        (370_500, 512_800, 0.31),
        (512_800, 673_000, 0.36),
        (673_000, 857_900, 0.39),
        (857_900, 1_817_000, 0.41),
        (1_817_000, None, 0.45),
    ],
    name="South Africa",
)

ZA_PRIMARY_REBATE = 17_235
ZA_SECONDARY_REBATE = 9_444  # age 65 and over
ZA_TERTIARY_REBATE = 3_145  # age 75 and over
ZA_RETIREMENT_DEDUCTION_CAP = 50_000

# Medical scheme fees tax credit (monthly)
ZA_MEDICAL_CREDIT_MAIN = 364
ZA_MEDICAL_CREDIT_FIRST_DEPENDENT = 364
ZA_MEDICAL_CREDIT_ADDITIONAL = 246

ZA_UIF_RATE = 0.01
ZA_UIF_CEILING_MONTHLY = 17_712


# ═══════════════════════════════════════════════════════════════════════════════
# INDIA (INR)
# ═══════════════════════════════════════════════════════════════════════════════

IN_NEW_REGIME_BRACKETS = BracketTable(
    [
        (0, 400_000, 0.0),
        (400_000, 800_000, 0.05),
        (800_000, 1_200_000, 0.10),
        (1_200_000, 1_600_000, 0.15),
        (1_600_000, 2_000_000, 0.20),
        (2_000_000, 2_400_000, 0.25),
        (2_400_000, None, 0.30),
    ],
    name="India new regime",
)

# Old regime: basic exemption depends on age
IN_OLD_REGIME_BRACKETS = {
    "general": BracketTable(
        [
            (0, 250_000, 0.0),
            (250_000, 500_000, 0.05),
            (500_000, 1_000_000, 0.20),
            (1_000_000, None, 0.30),
        ],
        name="India old regime",
    ),
    "senior": BracketTable(
        [
            (0, 300_000, 0.0),
            (300_000, 500_000, 0.05),
            (500_000, 1_000_000, 0.20),
            (1_000_000, None, 0.30),
        ],
        name="India old regime (60-79)",
    ),
    "super_senior": BracketTable(
        [
            (0, 500_000, 0.0),
            (500_000, 1_000_000, 0.20),
            (1_000_000, None, 0.30),
        ],
        name="India old regime (80+)",
    ),
}
IN_SENIOR_AGE = 60
IN_SUPER_SENIOR_AGE = 80

IN_STANDARD_DEDUCTION = {"new": 75_000, "old": 50_000}

# Section 87A: (taxable income limit, maximum rebate)
IN_REBATE_87A = {"new": (1_200_000, 60_000), "old": (500_000, 12_500)}

IN_80C_CAP = 150_000
IN_80D_CAP = 25_000
IN_80D_SENIOR_CAP = 50_000
IN_HRA_RATE = 0.40
IN_HRA_CAP = 120_000

# Surcharge on income tax: (taxable income above, rate)
IN_SURCHARGE_TIERS = [
    (50_000_000, 0.37),
    (20_000_000, 0.25),
    (10_000_000, 0.15),
    (5_000_000, 0.10),
]
IN_NEW_REGIME_MAX_SURCHARGE = 0.25
IN_CESS_RATE = 0.04


# ═══════════════════════════════════════════════════════════════════════════════
# SINGAPORE (SGD)
# ═══════════════════════════════════════════════════════════════════════════════

SG_RESIDENT_BRACKETS = BracketTable(
    [
        (0, 20_000, 0.0),
        (20_000, 30_000, 0.02),
        (30_000, 40_000, 0.035),
        (40_000, 80_000, 0.07),
        (80_000, 120_000, 0.115),
        (120_000, 160_000, 0.15),
        (160_000, 200_000, 0.18),
        (200_000, 240_000, 0.19),
        (240_000, 280_000, 0.195),
        (280_000, 320_000, 0.20),
        (320_000, 500_000, 0.22),
        (500_000, 1_000_000, 0.23),
        (1_000_000, None, 0.24),
    ],
    name="Singapore resident",
)
SG_NON_RESIDENT_FLAT_RATE = 0.15

SG_CPF_ORDINARY_WAGE_CEILING_MONTHLY = 6_800
# Employee CPF rate by age: (age up to and including, rate)
SG_CPF_RATES = [
    (55, 0.20),
    (60, 0.17),
    (65, 0.115),
    (70, 0.075),
    (None, 0.05),
]
