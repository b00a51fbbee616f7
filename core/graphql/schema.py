import strawberry
from apps.campaigns.graphql.queries import CampaignQueries


@strawberry.type
class Query(CampaignQueries):
    pass


# reporting is read-only, so there is no Mutation root
schema = strawberry.Schema(query=Query)
