# AWS Export Configuration for canvasform
# Provider: Amazon Web Services (aws provider)
# Families: compute > security groups > elastic IPs > storage > networks > CDN

# Provider metadata
PROVIDER_NAME = "AWS"
PROVIDER_BLOCK = "aws"
DEFAULT_REGION = "us-east-1"
DEFAULT_TAGS = {"Environment": "Production"}

# Canvas node kinds (sub-service ids, or icon/service ids for root nodes)
EC2_SERVICE = "ec2"
EC2_INSTANCE = "ec2-instance"
EBS_VOLUME = "ebs-volume"
SECURITY_GROUP = "security-group"
ELASTIC_IP = "elastic-ip"
S3_SERVICE = "s3"
S3_BUCKET = "s3-bucket"
S3_LIFECYCLE = "s3-lifecycle"
VPC = "vpc"
VPC_SUBNET = "vpc-subnet"
INTERNET_GATEWAY = "internet-gateway"
ROUTE_TABLE = "route-table"
CF_DISTRIBUTION = "cf-distribution"
LAMBDA_FUNCTION = "lambda-function"
RDS_INSTANCE = "rds-instance"
RDS_SUBNET_GROUP = "rds-subnet-group"

# Children whose parent is a VPC root node; used to derive VPCs when no root
# VPC node was exported on its own
VPC_CHILD_KINDS = [VPC_SUBNET, INTERNET_GATEWAY, ROUTE_TABLE]

# Resource families in output order. Each family is grouped independently and
# only groups containing a node of the primary kind are synthesized.
AWS_RESOURCE_FAMILIES = [
    {
        "family": "compute",
        "kinds": [EC2_INSTANCE, EBS_VOLUME],
        "primary": EC2_INSTANCE,
    },
    {"family": "security_group", "kinds": [SECURITY_GROUP], "primary": SECURITY_GROUP},
    {"family": "elastic_ip", "kinds": [ELASTIC_IP], "primary": ELASTIC_IP},
    {"family": "storage", "kinds": [S3_BUCKET], "primary": S3_BUCKET},
    {"family": "network", "kinds": [VPC], "primary": VPC},
    {"family": "cdn", "kinds": [CF_DISTRIBUTION], "primary": CF_DISTRIBUTION},
    {"family": "function", "kinds": [LAMBDA_FUNCTION], "primary": LAMBDA_FUNCTION},
    {"family": "database", "kinds": [RDS_INSTANCE], "primary": RDS_INSTANCE},
]

# Names used when neither the parent nor the node carries an identity property
AWS_FALLBACK_NAMES = {
    "compute": "web_server",
    "security_group": "security-group",
    "elastic_ip": "elastic_ip",
    "storage": "my-s3-bucket",
    "network": "vpc",
    "cdn": "my_cdn_distribution",
    "function": "MyLambdaFunction",
    "database": "my-database",
}

# Well-known ports recognised in free-text inbound rules
AWS_WELL_KNOWN_PORTS = {22: "SSH", 80: "HTTP", 443: "HTTPS"}
DEFAULT_INGRESS_CIDR = "0.0.0.0/0"

# Keys rendered as nested blocks instead of attributes, per resource type.
# The same set is consulted inside nested blocks of that resource.
AWS_BLOCK_KEYS = {
    "aws_instance": [
        "root_block_device",
        "ebs_block_device",
        "network_interface",
        "credit_specification",
        "metadata_options",
    ],
    "aws_security_group": ["ingress", "egress"],
    "aws_s3_bucket": [
        "versioning",
        "cors_rule",
        "lifecycle_rule",
        "website",
        "logging",
        "server_side_encryption_configuration",
    ],
    "aws_s3_bucket_versioning": ["versioning_configuration"],
    "aws_s3_bucket_ownership_controls": ["rule"],
    "aws_s3_bucket_server_side_encryption_configuration": [
        "rule",
        "apply_server_side_encryption_by_default",
    ],
    "aws_s3_bucket_cors_configuration": ["cors_rule"],
    "aws_s3_bucket_website_configuration": ["index_document", "error_document"],
    "aws_s3_bucket_lifecycle_configuration": [
        "rule",
        "filter",
        "transition",
        "expiration",
    ],
    "aws_cloudfront_distribution": [
        "origin",
        "default_cache_behavior",
        "forwarded_values",
        "cookies",
        "restrictions",
        "geo_restriction",
        "viewer_certificate",
    ],
    "aws_lambda_function": ["environment"],
}

# Compute defaults
DEFAULT_AMI = "ami-0c55b159cbfafe1f0"
DEFAULT_INSTANCE_TYPE = "t2.micro"

# Storage defaults
DEFAULT_OBJECT_OWNERSHIP = "BucketOwnerPreferred"
LIFECYCLE_TRANSITION_STORAGE_CLASS = "STANDARD_IA"
DEFAULT_ORIGIN_DOMAIN = "my_app_storage_bucket.s3.amazonaws.com"
S3_DOMAIN_SUFFIX = ".s3.amazonaws.com"

# Network defaults
DEFAULT_VPC_CIDR = "10.0.0.0/16"

# Function defaults
DEFAULT_LAMBDA_RUNTIME = "nodejs18.x"
DEFAULT_LAMBDA_HANDLER = "index.handler"
DEFAULT_LAMBDA_ROLE = "arn:aws:iam::123456789012:role/lambda-execution-role"

# Database defaults
DEFAULT_DB_ENGINE = "mysql"
DEFAULT_DB_INSTANCE_CLASS = "db.t3.micro"
DEFAULT_DB_STORAGE = 20
DEFAULT_DB_NAME = "mydatabase"
DEFAULT_DB_USERNAME = "dbadmin"
DEFAULT_DB_PASSWORD = "SECRET_PASSWORD_PLACEHOLDER"

# Diagram export
DRAWIO_DEFAULT_EDGE_COLOR = "#3B82F6"
DRAWIO_DIAGRAM_NAME = "AWS Architecture"
DRAWIO_DIAGRAM_ID = "aws-arch"
