"""
Pattern tables shared by the field extractors.

Kept separate from the extractor logic so tables can be tuned without touching
matching code. Order matters wherever a table feeds a first-match-wins
classifier: earlier groups take precedence.
"""

from typing import Dict, List, Tuple


# ===== LOCATION TABLES =====

US_STATES = {
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA", "HI", "ID", "IL", "IN",
    "IA", "KS", "KY", "LA", "ME", "MD", "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV",
    "NH", "NJ", "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC", "SD", "TN",
    "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY", "DC",
}

COUNTRIES = {
    "usa", "united states", "canada", "mexico", "uk", "united kingdom", "england",
    "ireland", "germany", "france", "spain", "italy", "netherlands", "switzerland",
    "sweden", "norway", "denmark", "finland", "poland", "portugal", "israel", "india",
    "china", "japan", "korea", "south korea", "singapore", "australia", "new zealand",
    "brazil", "argentina", "uae", "nigeria", "kenya", "south africa", "philippines",
    "vietnam", "indonesia", "malaysia", "pakistan", "egypt",
}

# Multi-word state and country names, looked up as two words after the comma
MULTI_WORD_REGIONS = {
    "new york", "new mexico", "new hampshire", "new jersey", "north carolina",
    "north dakota", "south carolina", "south dakota", "west virginia", "puerto rico",
    "rhode island", "united states", "united kingdom", "new zealand", "south korea",
    "south africa",
}

US_STATE_NAMES = {
    "alabama", "alaska", "arizona", "arkansas", "california", "colorado", "connecticut",
    "delaware", "florida", "georgia", "hawaii", "idaho", "illinois", "indiana", "iowa",
    "kansas", "kentucky", "louisiana", "maine", "maryland", "massachusetts", "michigan",
    "minnesota", "mississippi", "missouri", "montana", "nebraska", "nevada", "ohio",
    "oklahoma", "oregon", "pennsylvania", "tennessee", "texas", "utah", "vermont",
    "virginia", "washington", "wisconsin", "wyoming",
}

KNOWN_CITIES = [
    "San Francisco", "New York City", "New York", "Seattle", "Austin", "Boston", "Chicago",
    "Los Angeles", "Denver", "Portland", "Miami", "Atlanta", "San Jose", "San Diego",
    "Mountain View", "Palo Alto", "Menlo Park", "Sunnyvale", "Cupertino", "Redmond",
    "Pittsburgh", "Philadelphia", "Dallas", "Houston", "Raleigh", "Salt Lake City",
    "Minneapolis", "Detroit", "Phoenix", "Washington D.C.", "Toronto", "Vancouver",
    "Montreal", "London", "Dublin", "Berlin", "Munich", "Paris", "Amsterdam", "Zurich",
    "Stockholm", "Tel Aviv", "Bangalore", "Bengaluru", "Hyderabad", "Singapore",
    "Tokyo", "Sydney", "Melbourne",
]

# Words that look like a capitalized city but never are
NOT_A_CITY = {"study", "abroad", "institute", "program", "semester", "intern", "internship",
              "engineer", "developer", "team", "office", "remote", "hybrid", "inc", "llc", "corp"}


# ===== COMPANY TABLES =====

FREE_MAIL_PROVIDERS = {
    "gmail", "googlemail", "yahoo", "outlook", "hotmail", "live", "msn", "aol", "icloud",
    "me", "mac", "protonmail", "proton", "gmx", "mail", "yandex", "zoho",
}

# Applicant-tracking and job-board domains: a sender or link on these says
# nothing about the hiring company.
JOB_PLATFORM_DOMAINS = {
    "greenhouse", "greenhouse-mail", "lever", "hire", "workday", "myworkday", "myworkdayjobs",
    "smartrecruiters", "jobvite", "icims", "bamboohr", "successfactors", "taleo",
    "ashbyhq", "breezy", "recruitee", "workable", "linkedin", "indeed", "glassdoor",
    "ziprecruiter", "monster", "simplyhired", "careerbuilder", "handshake", "joinhandshake",
    "wellfound", "angel", "dice", "hirevue", "hackerrank", "codesignal", "bit", "tinyurl",
}

DOMAIN_SUBDOMAIN_PREFIXES = {"www", "mail", "email", "careers", "jobs", "talent", "apply",
                             "boards", "recruiting", "hr", "notifications", "noreply", "no-reply"}
SECOND_LEVEL_TLDS = {"co", "com", "org", "net", "ac", "gov", "edu"}

# Lowercase mention -> display name
KNOWN_EMPLOYERS: Dict[str, str] = {
    "google": "Google", "microsoft": "Microsoft", "amazon": "Amazon", "apple": "Apple",
    "facebook": "Facebook", "meta": "Meta", "netflix": "Netflix", "uber": "Uber",
    "airbnb": "Airbnb", "spotify": "Spotify", "tesla": "Tesla", "twitter": "Twitter",
    "salesforce": "Salesforce", "adobe": "Adobe", "nvidia": "NVIDIA", "intel": "Intel",
    "ibm": "IBM", "oracle": "Oracle", "vmware": "VMware", "palantir": "Palantir",
    "stripe": "Stripe", "square": "Square", "dropbox": "Dropbox", "slack": "Slack",
    "zoom": "Zoom", "docusign": "DocuSign", "snowflake": "Snowflake", "databricks": "Databricks",
    "coinbase": "Coinbase", "robinhood": "Robinhood", "pinterest": "Pinterest", "snap": "Snap",
    "tiktok": "TikTok", "goldman sachs": "Goldman Sachs", "morgan stanley": "Morgan Stanley",
    "jp morgan": "JP Morgan", "blackrock": "BlackRock", "two sigma": "Two Sigma",
    "citadel": "Citadel", "jane street": "Jane Street", "hudson river trading": "Hudson River Trading",
}

# Display-name words that label a recruiting mailbox rather than the company
RECRUITING_NAME_WORDS = {"careers", "career", "recruiting", "recruitment", "recruiter", "talent",
                         "acquisition", "team", "hiring", "hr", "jobs", "university", "campus",
                         "the", "at", "via", "notifications", "no-reply", "noreply", "people"}

LEGAL_SUFFIXES = [
    "Incorporated", "Inc.", "Inc", "Corporation", "Corp.", "Corp", "L.L.C.", "LLC", "LLP",
    "Limited", "Ltd.", "Ltd", "PLC", "GmbH", "Co.", "Company", "Technologies", "Group",
    "Holdings", "Labs",
]

# Leading words a legal-suffix match may drag in from the sentence around it
COMPANY_LEAD_STOPWORDS = {"join", "at", "about", "with", "from", "by", "for", "welcome",
                          "to", "our", "your", "the", "us", "apply", "and"}

COMPANY_LINE_BLACKLIST = {"about", "job description", "description", "requirements",
                          "qualifications", "responsibilities", "benefits", "apply",
                          "apply now", "easy apply", "save", "share", "overview", "home",
                          "jobs", "careers", "search", "menu", "sign in", "messages",
                          "notifications", "about the job", "about us", "posted"}


# ===== JOB TITLE TABLES =====

TITLE_FAMILIES = [
    "software", "data", "product", "program", "project", "ux/ui", "ui/ux", "ux", "ui",
    "front-end", "front end", "frontend", "back-end", "back end", "backend",
    "full-stack", "full stack", "fullstack", "machine learning", "ml", "ai", "devops",
    "qa", "quality assurance", "test", "site reliability", "cloud", "mobile", "ios",
    "android", "web", "security", "cybersecurity", "systems", "system", "network",
    "research", "business", "marketing", "financial", "finance", "hardware", "embedded",
    "graphic", "visual", "interaction", "platform", "infrastructure", "analytics",
    "operations", "sales", "design",
]

TITLE_ROLES = [
    "engineering", "engineer", "developer", "development", "scientist", "science",
    "analyst", "analytics", "designer", "design", "manager", "management",
    "researcher", "architect", "specialist", "consultant", "associate", "administrator",
    "tester", "intern",
]

TITLE_INDICATORS = ["engineer", "developer", "designer", "analyst", "manager", "intern",
                    "scientist", "specialist", "coordinator", "architect", "consultant"]

# Acronyms kept uppercase when title-casing a lowercase match
TITLE_ACRONYMS = {"ux", "ui", "ux/ui", "ui/ux", "qa", "ml", "ai", "ios", "it", "hr"}


# ===== SKILL VOCABULARY =====
# canonical label -> lowercase aliases, grouped by category

SKILL_VOCABULARY: Dict[str, Dict[str, List[str]]] = {
    "languages": {
        "Python": ["python"],
        "Java": ["java"],
        "JavaScript": ["javascript"],
        "TypeScript": ["typescript"],
        "C++": ["c++"],
        "C#": ["c#"],
        "Golang": ["golang"],
        "Rust": ["rust"],
        "Ruby": ["ruby"],
        "PHP": ["php"],
        "Swift": ["swift"],
        "Kotlin": ["kotlin"],
        "Scala": ["scala"],
        "SQL": ["sql"],
        "HTML": ["html", "html5"],
        "CSS": ["css", "css3"],
        "MATLAB": ["matlab"],
        "Bash": ["bash", "shell scripting"],
        "Objective-C": ["objective-c"],
        "Dart": ["dart"],
    },
    "frameworks": {
        "React": ["react", "react.js", "reactjs"],
        "Angular": ["angular", "angular.js", "angularjs"],
        "Vue.js": ["vue.js", "vuejs", "vue"],
        "Node.js": ["node.js", "nodejs"],
        "Express.js": ["express.js", "expressjs"],
        "Next.js": ["next.js", "nextjs"],
        "Django": ["django"],
        "Flask": ["flask"],
        "FastAPI": ["fastapi"],
        "Spring Boot": ["spring boot"],
        ".NET": [".net", "asp.net"],
        "Ruby on Rails": ["ruby on rails", "rails"],
        "TensorFlow": ["tensorflow"],
        "PyTorch": ["pytorch"],
        "Keras": ["keras"],
        "scikit-learn": ["scikit-learn", "sklearn"],
        "Pandas": ["pandas"],
        "NumPy": ["numpy"],
        "Spark": ["spark", "pyspark", "apache spark"],
        "Hadoop": ["hadoop"],
        "jQuery": ["jquery"],
        "Tailwind CSS": ["tailwind", "tailwindcss"],
        "Flutter": ["flutter"],
        "React Native": ["react native"],
    },
    "databases": {
        "PostgreSQL": ["postgresql", "postgres"],
        "MySQL": ["mysql"],
        "MongoDB": ["mongodb", "mongo"],
        "Redis": ["redis"],
        "SQLite": ["sqlite"],
        "DynamoDB": ["dynamodb"],
        "Cassandra": ["cassandra"],
        "Elasticsearch": ["elasticsearch"],
        "Snowflake": ["snowflake"],
        "BigQuery": ["bigquery"],
        "Oracle Database": ["oracle database", "oracle db", "pl/sql"],
    },
    "cloud_devops": {
        "AWS": ["aws", "amazon web services"],
        "Azure": ["azure"],
        "GCP": ["gcp", "google cloud"],
        "Docker": ["docker"],
        "Kubernetes": ["kubernetes", "k8s"],
        "Terraform": ["terraform"],
        "Jenkins": ["jenkins"],
        "CI/CD": ["ci/cd"],
        "Ansible": ["ansible"],
        "Linux": ["linux", "unix"],
        "GitHub Actions": ["github actions"],
    },
    "tools": {
        "Git": ["git"],
        "GitHub": ["github"],
        "GitLab": ["gitlab"],
        "Jira": ["jira"],
        "Figma": ["figma"],
        "Tableau": ["tableau"],
        "Power BI": ["power bi", "powerbi"],
        "Microsoft Excel": ["microsoft excel", "ms excel", "excel spreadsheets"],
        "Postman": ["postman"],
        "REST APIs": ["rest api", "rest apis", "restful"],
        "GraphQL": ["graphql"],
        "Agile": ["agile"],
        "Scrum": ["scrum"],
    },
}

SOFT_SKILLS = [
    ("communication", "Communication"),
    ("teamwork", "Teamwork"),
    ("collaborat", "Collaboration"),
    ("problem-solving", "Problem solving"),
    ("problem solving", "Problem solving"),
    ("leadership", "Leadership"),
    ("time management", "Time management"),
    ("attention to detail", "Attention to detail"),
    ("critical thinking", "Critical thinking"),
    ("self-motivated", "Self-motivation"),
    ("adaptab", "Adaptability"),
    ("curious", "Curiosity"),
]


# ===== BENEFITS =====
# (keywords, label); keywords of four characters or fewer are matched as whole words

BENEFIT_KEYWORDS: List[Tuple[Tuple[str, ...], str]] = [
    (("health insurance", "medical", "health"), "Health insurance"),
    (("dental",), "Dental insurance"),
    (("vision",), "Vision insurance"),
    (("401k", "401(k)", "retirement"), "401(k) / retirement plan"),
    (("pto", "paid time off", "vacation", "paid holidays"), "Paid time off"),
    (("remote",), "Remote work"),
    (("learning", "professional development", "tuition", "education stipend", "training budget"), "Learning & development"),
    (("wellness", "gym", "fitness"), "Wellness programs"),
    (("equity", "stock options", "rsu"), "Equity"),
    (("bonus",), "Bonus"),
    (("parental leave", "maternity", "paternity"), "Parental leave"),
    (("flexible hours", "flexible schedule", "flexible working"), "Flexible hours"),
    (("relocation",), "Relocation assistance"),
    (("housing",), "Housing assistance"),
    (("mentorship", "mentor"), "Mentorship"),
    (("free lunch", "meals", "snacks"), "Meals & snacks"),
    (("commuter", "transit"), "Commuter benefits"),
]


# ===== SINGLE-LABEL CLASSIFIERS =====
# (label, regex) pairs, tested in order against lowercased text

JOB_TYPE_GROUPS = [
    ("Internship", r"\b(?:intern|interns|internship|internships|co-?op)\b"),
    ("Full-time", r"\bfull[- ]?time\b"),
    ("Part-time", r"\bpart[- ]?time\b"),
    ("Contract", r"\b(?:contract|contractor|freelance)\b"),
    ("Temporary", r"\b(?:temporary|seasonal)\b"),
]

WORK_ARRANGEMENT_GROUPS = [
    ("Hybrid", r"\bhybrid\b"),
    ("Remote", r"\b(?:remote|work from home|wfh|fully distributed)\b"),
    ("On-site", r"\b(?:on-?site|on site|in-office|in office|in-person|in person)\b"),
]

SENIORITY_GROUPS = [
    ("Intern", r"\b(?:intern|internship|co-?op)\b"),
    ("Entry-level", r"\b(?:entry[- ]level|junior|jr\.?|new grad(?:uate)?|early career|graduate program)\b"),
    ("Executive", r"\b(?:director|vice president|vp|chief|head of)\b"),
    ("Lead", r"\b(?:lead|principal|staff)\s+(?:engineer|developer|designer|scientist|analyst|architect)\b"),
    ("Senior", r"\b(?:senior|sr\.)\s+\w+"),
    ("Mid-level", r"\b(?:mid[- ]level|intermediate|mid[- ]senior)\b"),
]

DEPARTMENT_GROUPS = [
    ("Engineering", r"\b(?:software|engineering|developer|devops|backend|frontend|full[- ]?stack|infrastructure)\b"),
    ("Data Science & Analytics", r"\b(?:data scien\w*|machine learning|analytics|data analyst|data engineer\w*)\b"),
    ("Product", r"\bproduct (?:manager|management|team)\b"),
    ("Design", r"\b(?:ux|ui|user experience|product design\w*|graphic design\w*|visual design\w*)\b"),
    ("Research", r"\b(?:research scientist|researcher|r&d|research and development)\b"),
    ("Marketing", r"\b(?:marketing|growth|brand|content strategy|seo)\b"),
    ("Sales", r"\b(?:sales|business development|account executive)\b"),
    ("Finance", r"\b(?:finance|financial analyst|accounting|investment)\b"),
    ("Human Resources", r"\b(?:human resources|recruiting|people operations|talent acquisition)\b"),
    ("Operations", r"\b(?:operations|supply chain|logistics)\b"),
    ("Legal", r"\b(?:legal|compliance|paralegal)\b"),
    ("Customer Support", r"\b(?:customer support|customer success|customer service)\b"),
]

INDUSTRY_GROUPS = [
    ("Finance", r"\b(?:fintech|bank|banking|trading|hedge fund|asset management|insurance|payments)\b"),
    ("Healthcare", r"\b(?:healthcare|health care|biotech|pharmaceutical|medical device|hospital|clinical)\b"),
    ("Education", r"\b(?:edtech|education technology|university|school district|e-learning)\b"),
    ("E-commerce & Retail", r"\b(?:e-commerce|ecommerce|retail|marketplace|consumer goods)\b"),
    ("Media & Entertainment", r"\b(?:media|entertainment|gaming|streaming|music|publishing)\b"),
    ("Automotive & Transportation", r"\b(?:automotive|autonomous vehicles?|transportation|mobility|aerospace)\b"),
    ("Energy", r"\b(?:energy|renewable|solar|oil and gas|utilities|climate)\b"),
    ("Consulting", r"\b(?:consulting|consultancy|advisory)\b"),
    ("Government & Nonprofit", r"\b(?:government|federal agency|nonprofit|non-profit|ngo)\b"),
    ("Technology", r"\b(?:software|saas|cloud|technology|tech company|startup|artificial intelligence|ai)\b"),
]

SECURITY_CLEARANCE_GROUPS = [
    ("TS/SCI", r"\bts/sci\b"),
    ("Top Secret", r"\btop secret\b"),
    ("Secret", r"\bsecret clearance\b"),
    ("Public Trust", r"\bpublic trust\b"),
    ("Required", r"\b(?:security clearance|clearance required|active clearance)\b"),
]


# ===== EMAIL STATUS PHRASES =====
# Precedence: offer > rejected > interview > applied

STATUS_GROUPS = [
    ("offer", r"\b(?:offer(?! you an? interview)|congratulations|welcome to the team|offer letter)\b"),
    ("rejected", r"\b(?:unfortunately|regret|not selected|not been selected|not to move forward|"
                 r"move forward with other candidates|rejected|position has been filled)\b"),
    ("interview", r"\b(?:interview|interviews|next steps|assessment|coding challenge|technical screen|"
                  r"phone screen|online assessment|hackerrank|codesignal)\b"),
    ("applied", r"\b(?:application received|thank you for applying|thanks for applying|"
                r"application submitted|received your application|application has been received)\b"),
]
