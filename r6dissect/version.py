"""Game code versions that mark changes in the replay format."""

Y7S1 = 6884476
Y7S2 = 7040830
Y7S4 = 7338571
Y8S1 = 7408213
Y8S2 = 7601998
Y8S3 = 7762708
Y8S4 = 7921866
Y9S1 = 8111697
Y9S1_UPDATE3 = 8211379
Y9S2 = 8303162
Y9S3 = 8506016
Y9S4 = 8673114