# licensemap/catalog.py

"""
Curated classification tables.

- DEFAULT_TAXONOMY: the standard software taxonomy used when none is supplied
- VENDOR_PREFIXES: known vendor names recognised at the start of a product name
- VENDOR_OVERRIDES: vendor keyword -> canonical path, layered over derived vendors
- KEYWORD_MAP: canonical path -> keywords for the keyword tier
"""

DEFAULT_TAXONOMY = {
    "groups": [
        {
            "name": "Infrastructure Software",
            "children": [
                {
                    "name": "MS Applications",
                    "members": [
                        "Microsoft Office",
                        "Microsoft Excel",
                        "Microsoft Word",
                        "Microsoft PowerPoint",
                        "Microsoft Outlook",
                        "Microsoft Teams",
                        "Microsoft Access",
                        "Microsoft OneNote",
                        "Microsoft Visio",
                        "Microsoft Project",
                    ],
                },
                {
                    "name": "Web Browsers",
                    "members": [
                        "Google Chrome",
                        "Mozilla Firefox",
                        "Microsoft Edge",
                        "Safari",
                        "Opera",
                        "Internet Explorer",
                    ],
                },
                {
                    "name": "Operating Systems",
                    "members": [
                        "Microsoft Windows",
                        "Windows 10",
                        "Windows 11",
                        "macOS",
                        "Linux",
                        "Ubuntu",
                        "Red Hat",
                        "CentOS",
                    ],
                },
                {
                    "name": "Security",
                    "members": [
                        "Symantec",
                        "McAfee",
                        "Norton",
                        "Kaspersky",
                        "Trend Micro",
                        "Bitdefender",
                        "Malwarebytes",
                        "Avast",
                        "AVG",
                        "Windows Defender",
                    ],
                },
                {
                    "name": "Communication",
                    "members": [
                        "Zoom",
                        "Slack",
                        "Microsoft Teams",
                        "WebEx",
                        "Skype",
                        "Google Meet",
                        "Cisco Jabber",
                        "Discord",
                    ],
                },
                {
                    "name": "Database",
                    "members": [
                        "Microsoft SQL Server",
                        "MySQL",
                        "Oracle Database",
                        "PostgreSQL",
                        "MongoDB",
                        "SQLite",
                        "MariaDB",
                        "Redis",
                        "Microsoft Access",
                    ],
                },
                {
                    "name": "Business Intelligence",
                    "members": [
                        "Tableau",
                        "Power BI",
                        "Qlik",
                        "Looker",
                        "SAP BusinessObjects",
                        "MicroStrategy",
                        "SAS Business Intelligence",
                        "Oracle BI",
                    ],
                },
                {
                    "name": "Document Management",
                    "members": [
                        "Adobe Acrobat",
                        "Adobe Reader",
                        "PDF Creator",
                        "Microsoft SharePoint",
                        "Documentum",
                        "OpenText",
                        "Box",
                        "Dropbox",
                        "Google Drive",
                        "OneDrive",
                    ],
                },
                {
                    "name": "Project Management",
                    "members": [
                        "Microsoft Project",
                        "Jira",
                        "Asana",
                        "Trello",
                        "Monday.com",
                        "Smartsheet",
                        "Basecamp",
                        "Wrike",
                    ],
                },
            ],
        },
        {
            "name": "Engineering Software",
            "children": [
                {
                    "name": "CAD Tools",
                    "members": [
                        "AutoCAD",
                        "SolidWorks",
                        "Revit",
                        "Inventor",
                        "Fusion 360",
                        "CATIA",
                        "Creo",
                        "NX",
                        "Rhino",
                        "SketchUp",
                    ],
                },
                {
                    "name": "Simulation",
                    "members": [
                        "ANSYS",
                        "MATLAB",
                        "Simulink",
                        "COMSOL",
                        "Abaqus",
                        "NASTRAN",
                        "Fluent",
                        "SolidWorks Simulation",
                        "Altair HyperWorks",
                    ],
                },
                {
                    "name": "PLM",
                    "members": [
                        "Teamcenter",
                        "Windchill",
                        "Enovia",
                        "Aras",
                        "Agile PLM",
                        "SAP PLM",
                        "Oracle PLM",
                    ],
                },
                {
                    "name": "Design Tools",
                    "members": [
                        "Adobe Photoshop",
                        "Adobe Illustrator",
                        "Adobe InDesign",
                        "Adobe XD",
                        "Sketch",
                        "Figma",
                        "CorelDRAW",
                        "GIMP",
                        "Inkscape",
                    ],
                },
            ],
        },
        {
            "name": "ERP",
            "children": [
                {
                    "name": "SAP",
                    "members": [
                        "SAP ERP",
                        "SAP S/4HANA",
                        "SAP Business One",
                        "SAP ByDesign",
                        "SAP Fiori",
                    ],
                },
                {
                    "name": "Microsoft Dynamics",
                    "members": [
                        "Microsoft Dynamics 365",
                        "Microsoft Dynamics AX",
                        "Microsoft Dynamics NAV",
                        "Microsoft Dynamics GP",
                        "Microsoft Dynamics CRM",
                    ],
                },
                {
                    "name": "Oracle",
                    "members": [
                        "Oracle ERP Cloud",
                        "Oracle E-Business Suite",
                        "Oracle JD Edwards",
                        "Oracle PeopleSoft",
                        "NetSuite",
                    ],
                },
            ],
        },
        {
            "name": "CRM",
            "children": [
                {
                    "name": "Salesforce",
                    "members": [
                        "Salesforce Sales Cloud",
                        "Salesforce Service Cloud",
                        "Salesforce Marketing Cloud",
                        "Salesforce Platform",
                    ],
                },
                {
                    "name": "Microsoft",
                    "members": [
                        "Microsoft Dynamics CRM",
                        "Microsoft Dynamics 365 Customer Engagement",
                    ],
                },
                {
                    "name": "Other CRM",
                    "members": [
                        "HubSpot",
                        "Zoho CRM",
                        "Oracle CRM",
                        "SAP CRM",
                        "SugarCRM",
                        "Pipedrive",
                    ],
                },
            ],
        },
        {
            "name": "Development Tools",
            "children": [
                {
                    "name": "IDEs",
                    "members": [
                        "Visual Studio",
                        "Visual Studio Code",
                        "IntelliJ IDEA",
                        "PyCharm",
                        "Eclipse",
                        "Android Studio",
                        "Xcode",
                        "WebStorm",
                        "Atom",
                        "Sublime Text",
                    ],
                },
                {
                    "name": "Version Control",
                    "members": [
                        "Git",
                        "GitHub Desktop",
                        "GitLab",
                        "Bitbucket",
                        "SVN",
                        "Perforce",
                        "TFS",
                    ],
                },
                {
                    "name": "Collaboration",
                    "members": [
                        "Confluence",
                        "Jira",
                        "GitHub",
                        "GitLab",
                        "Azure DevOps",
                        "Slack",
                        "Microsoft Teams",
                    ],
                },
            ],
        },
    ]
}


# Checked in order; the first prefix the normalized name starts with wins.
VENDOR_PREFIXES = (
    "microsoft", "ms ", "adobe", "autodesk", "ibm", "oracle", "sap",
    "google", "atlassian", "salesforce", "vmware", "cisco", "siemens",
    "bentley", "dassault", "ptc", "hexagon", "aveva", "ansys", "tableau",
    "symantec", "mcafee", "kaspersky", "trend micro", "sophos", "avast",
)


VENDOR_OVERRIDES = {
    # Microsoft products
    "microsoft": "Infrastructure Software > MS Applications",
    "ms": "Infrastructure Software > MS Applications",
    "office": "Infrastructure Software > MS Applications",
    "excel": "Infrastructure Software > MS Applications",
    "word": "Infrastructure Software > MS Applications",
    "powerpoint": "Infrastructure Software > MS Applications",
    "outlook": "Infrastructure Software > MS Applications",
    "teams": "Infrastructure Software > MS Applications",
    "onedrive": "Infrastructure Software > MS Applications",
    "sharepoint": "Infrastructure Software > MS Applications",
    "skype": "Infrastructure Software > MS Applications",
    "windows": "Infrastructure Software > Operating Systems",

    # Adobe products
    "adobe": "Engineering Software > Design Tools",
    "photoshop": "Engineering Software > Design Tools",
    "illustrator": "Engineering Software > Design Tools",
    "indesign": "Engineering Software > Design Tools",
    "acrobat": "Infrastructure Software > Document Management",

    # Engineering tools
    "autocad": "Engineering Software > CAD Tools",
    "solidworks": "Engineering Software > CAD Tools",
    "ansys": "Engineering Software > Simulation",
    "matlab": "Engineering Software > Simulation",
    "siemens": "Engineering Software > PLM",
    "ptc": "Engineering Software > PLM",

    # Database and analytics
    "sql": "Infrastructure Software > Database",
    "oracle": "Infrastructure Software > Database",
    "tableau": "Infrastructure Software > Business Intelligence",
    "power bi": "Infrastructure Software > Business Intelligence",

    # Security
    "antivirus": "Infrastructure Software > Security",
    "vpn": "Infrastructure Software > Security",
    "firewall": "Infrastructure Software > Security",
    "symantec": "Infrastructure Software > Security",
    "mcafee": "Infrastructure Software > Security",

    # Messaging and communication
    "zoom": "Infrastructure Software > Communication",
    "slack": "Infrastructure Software > Communication",
    "webex": "Infrastructure Software > Communication",

    # Browsers
    "chrome": "Infrastructure Software > Web Browsers",
    "firefox": "Infrastructure Software > Web Browsers",
    "edge": "Infrastructure Software > Web Browsers",
    "safari": "Infrastructure Software > Web Browsers",

    # Project management
    "jira": "Infrastructure Software > Project Management",
    "asana": "Infrastructure Software > Project Management",
    "trello": "Infrastructure Software > Project Management",
    "atlassian": "Infrastructure Software > Project Management",

    # ERP and CRM
    "sap": "ERP > SAP",
    "salesforce": "CRM > Salesforce",
    "dynamics": "ERP > Microsoft Dynamics",
}


KEYWORD_MAP = {
    "Infrastructure Software > MS Applications": [
        "microsoft", "ms", "office", "excel", "word", "powerpoint", "outlook",
        "teams", "onedrive", "sharepoint", "skype", "visio", "access", "onenote",
    ],
    "Infrastructure Software > Operating Systems": [
        "windows", "linux", "ubuntu", "redhat", "centos", "macos", "os", "operating system",
    ],
    "Infrastructure Software > Database": [
        "sql", "oracle", "db", "database", "mysql", "postgresql", "mongodb", "mariadb",
        "nosql", "data warehouse",
    ],
    "Infrastructure Software > Web Browsers": [
        "chrome", "firefox", "edge", "safari", "opera", "browser", "internet explorer",
    ],
    "Infrastructure Software > Business Intelligence": [
        "bi", "tableau", "power bi", "qlik", "looker", "analytics", "dashboard", "reporting",
        "data visualization",
    ],
    "Infrastructure Software > Security": [
        "antivirus", "vpn", "firewall", "security", "encryption", "malware", "protection",
        "endpoint", "symantec", "mcafee",
    ],
    "Infrastructure Software > Communication": [
        "zoom", "slack", "webex", "chat", "meeting", "conference", "video", "voip", "voice", "call",
    ],
    "Infrastructure Software > Document Management": [
        "pdf", "acrobat", "document", "reader", "writer", "editor", "ocr", "scanner",
    ],
    "Infrastructure Software > Project Management": [
        "jira", "asana", "trello", "project", "task", "kanban", "scrum", "agile", "portfolio",
        "planning",
    ],
    "Engineering Software > CAD Tools": [
        "cad", "autocad", "solidworks", "inventor", "revit", "fusion", "drawing", "3d",
        "modeling", "design",
    ],
    "Engineering Software > Simulation": [
        "simulation", "ansys", "abaqus", "nastran", "fea", "cfd", "fem", "matlab", "simulink",
        "analysis",
    ],
    "Engineering Software > PLM": [
        "plm", "pdm", "teamcenter", "windchill", "enovia", "product lifecycle",
        "data management", "siemens", "ptc",
    ],
    "Engineering Software > Design Tools": [
        "design", "adobe", "photoshop", "illustrator", "indesign", "xd", "creative cloud",
        "sketching",
    ],
    "ERP > SAP": [
        "sap", "erp", "resource planning", "hana", "fiori",
    ],
    "ERP > Microsoft Dynamics": [
        "dynamics", "ax", "nav", "crm", "erp", "microsoft",
    ],
    "CRM > Salesforce": [
        "salesforce", "crm", "customer relationship", "sales cloud", "service cloud",
        "marketing cloud",
    ],
}
