"""Category names and fixed bookkeeping labels used across the app."""

DONATION_SUB_CATEGORIES = {
    "Vargani": [
        "shivJayanti", "ganeshUtsav", "yatra", "navratri", "bailPola",
        "ashadhiEkadashi", "diwali", "dasra", "mahaShivratri", "shreekrishnaJanmashtami",
    ],
    "Dengi": ["yatraUtsav", "bandkam", "itar"],
    "Shaskiy Nidhi": [
        "kendraShashan", "rajyaShashan", "mantriNidhi", "aamdarNidhi",
        "khajdarNidhi", "grampanchayat", "panchayatSamiti",
    ],
}

EXPENSE_SUB_CATEGORIES = {
    "Utsav": [
        "parayan", "dindi", "shivjayanti", "ganeshUtsav", "yatra", "navratra", "bailPola",
        "ashadhiEkadashi", "diwali", "dasra", "mahashivratri", "shreeKrushnaJanmashtami", "ramNavami",
    ],
    "Gala Kharch": ["bandhkam", "putalaKharch", "karmchariPagar", "karmchariKharch", "safayi", "itar"],
    "Mandir Dekhbhal": [
        "bandhkam", "pooja", "karmchariPagar", "karmchariKharch", "safayi",
        "soundLightMaintenance", "flowerDecoration", "securityServices",
    ],
}

VARGANI = "Vargani"

# RentIncome bookkeeping
DEPOSIT_CATEGORY = "Security Deposit"
DEPOSIT_SUB_CATEGORY = "newAgreement"
RENT_CATEGORY = "Bhade Jama"
RENT_SUB_CATEGORY = "bhade1Jama"
EMI_CATEGORY = "Loan EMI"
EMI_SUB_CATEGORY = "loanRepayment"
PENALTY_CATEGORY = "Rent Penalty"
PENALTY_SUB_CATEGORY = "penaltyPayment"

SHOP_STATUSES = ("Vacant", "Occupied", "Maintenance")
TENANT_STATUSES = ("Active", "Inactive")
AGREEMENT_STATUSES = ("Active", "Expired", "Terminated")
AGREEMENT_TYPES = ("Residential", "Commercial")
LOAN_STATUSES = ("Active", "Completed", "Defaulted")
PENALTY_STATUSES = ("Pending", "Paid")
USER_STATUSES = ("Active", "Inactive")
