# feature_board/data_access/seed_data.py
"""Demo catalogue loaded into the fallback store."""

SEED_FEEDBACK = [
    {
        "id": "1",
        "title": "Dark mode support",
        "description": "Please add a dark mode toggle to the interface. It would help reduce eye strain during long usage sessions and provide a more modern user experience.",
        "status": "In Progress",
        "submitted_at": "2024-01-15T10:30:00Z",
        "updated_at": "2024-01-20T14:22:00Z",
        "tags": ["UI/UX", "Enhancement"],
        "category": "POS",
        "sub_category": "Hardware",
        "voted_by": ["testuser@example.com", "alice@example.com", "bob@example.com", "charlie@example.com"],
    },
    {
        "id": "2",
        "title": "Export sales reports to CSV",
        "description": "Add functionality to export all sales reports to CSV format for analysis and reporting purposes. This would be useful for business managers.",
        "status": "Under Review",
        "submitted_at": "2024-01-18T16:45:00Z",
        "updated_at": "2024-01-18T16:45:00Z",
        "tags": ["Export", "Data"],
        "category": "BackOffice",
        "sub_category": "Reports",
        "voted_by": ["alice@example.com", "diana@example.com"],
    },
    {
        "id": "3",
        "title": "Mobile POS application",
        "description": "Develop a mobile application that allows cashiers to process orders on-the-go. This would increase flexibility and make it easier for staff to serve customers.",
        "status": "Completed",
        "submitted_at": "2024-01-10T12:00:00Z",
        "updated_at": "2024-01-25T10:15:00Z",
        "tags": ["Mobile", "App", "Enhancement"],
        "category": "POS",
        "sub_category": "Order management",
        "voted_by": ["alice@example.com", "bob@example.com", "charlie@example.com", "diana@example.com", "evan@example.com"],
    },
    {
        "id": "4",
        "title": "Email notifications for inventory alerts",
        "description": "Send email notifications to managers when inventory levels are low or when products are out of stock.",
        "status": "Under Review",
        "submitted_at": "2024-01-20T14:30:00Z",
        "updated_at": "2024-01-20T14:30:00Z",
        "tags": ["Notifications", "Email"],
        "category": "BackOffice",
        "sub_category": "Stock management",
        "voted_by": ["evan@example.com"],
    },
    {
        "id": "5",
        "title": "Advanced payment processing",
        "description": "Implement support for multiple payment methods including contactless cards, mobile payments, and digital wallets.",
        "status": "In Progress",
        "submitted_at": "2024-01-12T11:20:00Z",
        "updated_at": "2024-01-22T15:10:00Z",
        "tags": ["Payments", "Enhancement"],
        "category": "POS",
        "sub_category": "Payments",
        "voted_by": ["bob@example.com", "charlie@example.com", "diana@example.com"],
    },
    {
        "id": "6",
        "title": "Employee performance tracking",
        "description": "Add functionality to track employee sales performance, working hours, and customer service metrics for better management insights.",
        "status": "Under Review",
        "submitted_at": "2024-01-22T09:15:00Z",
        "updated_at": "2024-01-22T09:15:00Z",
        "tags": ["Management", "Analytics"],
        "category": "BackOffice",
        "sub_category": "Employee management",
        "voted_by": ["testuser@example.com"],
    },
]
