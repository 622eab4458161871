"""English / Marathi labels for exported reports."""

LANGUAGES = ("en", "mr")

TEMPLE_NAME_MR = "श्री क्षेत्र खंडेश्वर देवस्थान कुसळंब"

LABELS = {
    "en": {
        "header.title": "Shree Kshetra Khandeshar Devasthan Kusalamb",
        "header.subtitle": "Temple Management System",
        "reports.financialReport": "Financial Report",
        "reports.generatedOn": "Generated On",
        "reports.appliedFilters": "Applied Filters",
        "reports.period": "Period",
        "reports.srNo": "Sr. No.",
        "reports.totalAmount": "Total Amount",
        "dashboard.totalDonations": "Total Donations",
        "dashboard.totalRentIncome": "Total Rent Income",
        "dashboard.totalExpenses": "Total Expenses",
        "dashboard.netBalance": "Net Balance",
        "common.date": "Date",
        "common.type": "Type",
        "donations.category": "Category",
        "common.description": "Description",
        "common.amount": "Amount",
        "reports.donations": "Donations",
        "reports.expenses": "Expenses",
        "reports.rentIncome": "Rent Income",
        "reports.net": "Net",
        "reports.overview": "Financial Overview",
        "reports.categoryBreakdown": "Category Breakdown",
        "reports.monthlyTrend": "Monthly Trend",
        "reports.transactionReport": "Transaction Report",
        "reports.summaryReport": "Summary Report",
        "reports.categoryReport": "Category Report",
        "reports.monthlyReport": "Monthly Report",
        "reports.month": "Month",
    },
    "mr": {
        "header.title": TEMPLE_NAME_MR,
        "header.subtitle": "मंदिर व्यवस्थापन प्रणाली",
        "reports.financialReport": "आर्थिक अहवाल",
        "reports.generatedOn": "तयार केले",
        "reports.appliedFilters": "लागू फिल्टर",
        "reports.period": "कालावधी",
        "reports.srNo": "अ. क्र.",
        "reports.totalAmount": "एकूण रक्कम",
        "dashboard.totalDonations": "एकूण जमा",
        "dashboard.totalRentIncome": "एकूण भाडे उत्पन्न",
        "dashboard.totalExpenses": "एकूण खर्च",
        "dashboard.netBalance": "निव्वळ शिल्लक",
        "common.date": "दिनांक",
        "common.type": "प्रकार",
        "donations.category": "श्रेणी",
        "common.description": "वर्णन",
        "common.amount": "रक्कम",
        "reports.donations": "जमा",
        "reports.expenses": "खर्च",
        "reports.rentIncome": "भाडे उत्पन्न",
        "reports.net": "निव्वळ",
        "reports.overview": "आर्थिक सारांश",
        "reports.categoryBreakdown": "श्रेणी विभाजन",
        "reports.monthlyTrend": "मासिक प्रवृत्ती",
        "reports.transactionReport": "व्यवहार अहवाल",
        "reports.summaryReport": "सारांश अहवाल",
        "reports.categoryReport": "श्रेणी अहवाल",
        "reports.monthlyReport": "मासिक अहवाल",
        "reports.month": "महिना",
    },
}

REPORT_TITLES = {
    "transactions": "reports.transactionReport",
    "summary": "reports.summaryReport",
    "categoryBreakdown": "reports.categoryReport",
    "monthly": "reports.monthlyReport",
}


def label(key: str, language: str = "en") -> str:
    """Translated label; unknown keys come back unchanged."""
    return LABELS.get(language, LABELS["en"]).get(key, key)
